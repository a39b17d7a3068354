#
# DecoProfile - dive profile analysis library.
#
# Copyright (C) 2013-2014 by Artur Wroblewski <wrobell@pld-linux.org>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
#


"""
Introduction
------------
The DecoProfile library calculates decompression information of a recorded
dive with two decompression models

ZH-L16-GF
    Buhlmann decompression model ZH-L16 with gradient factors by Erik
    Baker.
VPM-B
    Varying permeability model with Boyle law compensation.

Both models describe human body as 16 tissue compartments. The inert gas
pressure in the compartments is tracked with :py:class:`DecoState` object,
which is advanced forward in time with :py:meth:`ZH_L16_GF.load` method.

Tissue Loading
--------------
The recorded dive profile consists of short dive segments (20 seconds at
most), therefore the profile is approximated with constant depth segments
and the tissue loading uses Haldane equation

    .. math::

        P = P_{i} + (P_{alv} - P_{i}) * (1 - e^{-k * t})

where

:math:`P_{i}`
    Initial inert gas pressure in a tissue compartment.
:math:`P_{alv}`
    Pressure of inspired inert gas, which depends on dive mode (see
    :py:func:`decoprofile.gas.fill_pressures`) and water vapour pressure.
:math:`k`
    Gas decay constant for a tissue compartment: :math:`k = ln(2) / T_{hl}`
:math:`t`
    Time of exposure in minutes.

Ascent Ceiling
--------------
The ZH-L16-GF model calculates tolerated ambient pressure of a tissue
compartment with Buhlmann equation extended with gradient factors. The
gradient factor changes evenly between *gf low* value at the deepest *gf
low* ceiling seen during the dive and *gf high* value at the surface.

The VPM-B model calculates tolerated ambient pressure using allowed
supersaturation gradients. The gradients are derived from the radii of gas
nuclei, which are crushed during descent and regenerate over time. The
gradients shallower than the first ceiling are compensated with Boyle law.
The allowed gradients depend on total decompression time, therefore the
decompression engine repeats the calculations until the decompression time
converges (critical volume algorithm).

References
----------
* Baker, Erik. *Understanding M-values*.
* Baker, Erik. *VPM-B program*, vpmdeco.f.
* Yount, David. *Decompression theory - bubble models*.
"""

import copy
import math
import logging

from .config import DecoMode
from .gas import fill_pressures
from . import const

logger = logging.getLogger(__name__)

# VPM-B state surviving rollback of tissue loading
_VPMB_KEPT = (
    'max_n2_crushing_pressure', 'max_he_crushing_pressure',
    'max_ambient_pressure', 'initial_n2_gradient', 'initial_he_gradient',
    'bottom_n2_gradient', 'bottom_he_gradient',
)


class DecoState(object):
    """
    State of decompression model.

    The state is mutated step by step by decompression model. Use
    :py:meth:`DecoState.snapshot` and :py:meth:`DecoState.restore` to
    calculate "what-if" scenarios, i.e. time to surface of a diver.

    :var tissue_n2_sat: Nitrogen pressure in each tissue compartment [bar].
    :var tissue_he_sat: Helium pressure in each tissue compartment [bar].
    :var tissue_inertgas_saturation: Inert gas pressure in each tissue
        compartment [bar].
    :var buehlmann_inertgas_a: Combined Buhlmann coefficient A of each
        tissue compartment.
    :var buehlmann_inertgas_b: Combined Buhlmann coefficient B of each
        tissue compartment.
    :var tolerated_by_tissue: Tolerated ambient pressure of each tissue
        compartment [bar].
    :var ci_pointing_to_guiding_tissue: Index of guiding tissue
        compartment.
    :var gf_low_pressure_this_dive: Pressure of the deepest gf low ceiling
        seen during the dive [bar].
    :var deco_time: Total decompression time estimate [s].
    :var first_ceiling_pressure: Pressure of the first (deepest) ceiling
        [mbar].
    :var icd_warning: Isobaric counter diffusion warning.
    :var max_n2_crushing_pressure: VPM-B max nitrogen crushing pressures.
    :var max_he_crushing_pressure: VPM-B max helium crushing pressures.
    :var crushing_onset_tension: VPM-B gas tension at the onset of
        impermeability.
    :var n2_regen_radius: VPM-B regenerated nitrogen nuclei radii.
    :var he_regen_radius: VPM-B regenerated helium nuclei radii.
    :var initial_n2_gradient: VPM-B initial nitrogen gradients.
    :var initial_he_gradient: VPM-B initial helium gradients.
    :var bottom_n2_gradient: VPM-B nitrogen gradients at the first ceiling.
    :var bottom_he_gradient: VPM-B helium gradients at the first ceiling.
    :var max_ambient_pressure: VPM-B max ambient pressure [bar].
    """
    def __init__(self, p_n2, p_he=0.0, gf_low_pressure=0.0):
        n = const.NUM_COMPARTMENTS
        self.tissue_n2_sat = [p_n2] * n
        self.tissue_he_sat = [p_he] * n
        self.tissue_inertgas_saturation = [p_n2 + p_he] * n
        self.buehlmann_inertgas_a = [0.0] * n
        self.buehlmann_inertgas_b = [0.0] * n
        self.tolerated_by_tissue = [0.0] * n
        self.ci_pointing_to_guiding_tissue = 0
        self.gf_low_pressure_this_dive = gf_low_pressure
        self.deco_time = 0
        self.first_ceiling_pressure = 0
        self.icd_warning = False

        self.max_n2_crushing_pressure = [0.0] * n
        self.max_he_crushing_pressure = [0.0] * n
        self.crushing_onset_tension = [0.0] * n
        self.n2_regen_radius = [0.0] * n
        self.he_regen_radius = [0.0] * n
        self.initial_n2_gradient = [0.0] * n
        self.initial_he_gradient = [0.0] * n
        self.bottom_n2_gradient = [0.0] * n
        self.bottom_he_gradient = [0.0] * n
        self.max_ambient_pressure = 0.0


    def snapshot(self):
        """
        Create independent copy of the state.
        """
        return copy.deepcopy(self)


    def restore(self, snapshot, keep_vpmb=False):
        """
        Restore the state from a snapshot.

        The snapshot is copied, so it can be used to restore the state
        again.

        :param snapshot: State snapshot.
        :param keep_vpmb: Keep current VPM-B crushing pressures, max
            ambient pressure and allowed supersaturation gradients.
        """
        data = copy.deepcopy(snapshot.__dict__)
        if keep_vpmb:
            for name in _VPMB_KEPT:
                data[name] = getattr(self, name)
        self.__dict__.update(data)


    def __eq__(self, other):
        return isinstance(other, DecoState) and self.__dict__ == other.__dict__


    def __repr__(self):
        return 'DecoState(n2={}, he={}, deco_time={})'.format(
            ['{:.4f}'.format(v) for v in self.tissue_n2_sat],
            ['{:.4f}'.format(v) for v in self.tissue_he_sat],
            self.deco_time
        )



def eq_gf_limit(gf, p_n2, p_he, a_n2, b_n2, a_he, b_he):
    """
    Calculate ascent ceiling limit of a tissue compartment using Buhlmann
    equation extended with gradient factors by Erik Baker.

    The returned value is absolute pressure of depth of the ascent ceiling.

    :param gf: Gradient factor value.
    :param p_n2: Current tissue pressure for nitrogen.
    :param p_he: Current tissue pressure for helium.
    :param a_n2: Nitrox Buhlmann coefficient A.
    :param b_n2: Nitrox Buhlmann coefficient B.
    :param a_he: Helium Buhlmann coefficient A.
    :param b_he: Helium Buhlmann coefficient B.
    """
    assert gf > 0 and gf <= 1.5
    p = p_n2 + p_he
    a = (a_n2 * p_n2 + a_he * p_he) / p
    b = (b_n2 * p_n2 + b_he * p_he) / p
    return (p - a * gf) / (gf / b + 1 - gf)



class ZH_L16_GF(object):
    """
    Base abstract class for Buhlmann ZH-L16 decompression model with
    gradient factors by Erik Baker.

    :var gf_low: Gradient factor low parameter.
    :var gf_high: Gradient factor high parameter.
    :var satmult: Saturation multiplier.
    :var desatmult: Desaturation multiplier.
    :var gf_low_position_min: Minimal relative pressure of gf low
        position [bar].
    :var water_vapour_pressure: Water vapour pressure.
    :var n2_k_const: Gas decay constants :math:`k` for nitrogen for each
        tissue compartment.
    :var he_k_const: Gas decay constants :math:`k` for helium for each
        tissues compartment.
    """
    NUM_COMPARTMENTS = const.NUM_COMPARTMENTS
    DECO_MODE = DecoMode.BUEHLMANN
    N2_A = None
    N2_B = None
    HE_A = None
    HE_B = None
    N2_HALF_LIFE = None
    HE_HALF_LIFE = None

    def __init__(self, gf_low=0.3, gf_high=0.75):
        """
        Create instance of the model.

        :param gf_low: Gradient factor low parameter.
        :param gf_high: Gradient factor high parameter.
        """
        super().__init__()
        self.n2_k_const = self._k_const(self.N2_HALF_LIFE)
        self.he_k_const = self._k_const(self.HE_HALF_LIFE)
        self.gf_low = gf_low
        self.gf_high = gf_high
        self.satmult = 1.0
        self.desatmult = 1.0
        self.gf_low_position_min = 1.0

        self.water_vapour_pressure = const.WATER_VAPOUR_PRESSURE


    def init(self, surface_pressure):
        """
        Create decompression model state of a diver at the surface.

        :param surface_pressure: Surface pressure [bar].
        """
        p_n2 = (surface_pressure - self.water_vapour_pressure) \
            * const.N2_IN_AIR / 1000
        state = DecoState(
            p_n2, gf_low_pressure=surface_pressure + self.gf_low_position_min
        )
        self._coefficients(state)
        return state


    def load(self, state, abs_p, gasmix, time, po2, divemode, prefs):
        """
        Load all tissue compartments with inert gas.

        The isobaric counter diffusion warning of the state is set when
        nitrogen on-gassing exceeds helium off-gassing in the guiding
        tissue compartment.

        :param state: Decompression model state.
        :param abs_p: Absolute pressure [bar] (current depth).
        :param gasmix: Gas mix.
        :param time: Time of exposure [s].
        :param po2: Oxygen pressure in breathing loop [mbar].
        :param divemode: Dive mode.
        :param prefs: Analysis preferences.
        """
        pressures = fill_pressures(
            abs_p - self.water_vapour_pressure, gasmix, po2 / 1000,
            divemode, prefs
        )
        icd = False
        guiding = state.ci_pointing_to_guiding_tissue

        for ci in range(self.NUM_COMPARTMENTS):
            pn2_oversat = pressures.n2 - state.tissue_n2_sat[ci]
            phe_oversat = pressures.he - state.tissue_he_sat[ci]
            n2_f = self._factor(time, self.n2_k_const[ci])
            he_f = self._factor(time, self.he_k_const[ci])
            n2_mult = self.satmult if pn2_oversat > 0 else self.desatmult
            he_mult = self.satmult if phe_oversat > 0 else self.desatmult

            dn2 = n2_mult * pn2_oversat * n2_f
            dhe = he_mult * phe_oversat * he_f
            if ci == guiding and pn2_oversat > 0 and phe_oversat < 0:
                icd = dn2 + dhe > 0

            state.tissue_n2_sat[ci] += dn2
            state.tissue_he_sat[ci] += dhe
            state.tissue_inertgas_saturation[ci] = \
                state.tissue_n2_sat[ci] + state.tissue_he_sat[ci]

        state.icd_warning = icd


    def tolerance(self, state, abs_p, surface_pressure):
        """
        Calculate tolerated ambient pressure [bar].

        The tolerated pressure of each tissue compartment and guiding
        tissue compartment are stored in the state.

        :param state: Decompression model state.
        :param abs_p: Absolute pressure of current depth [bar].
        :param surface_pressure: Surface pressure [bar].
        """
        self._coefficients(state)

        gf_low = self.gf_low
        gf_high = self.gf_high
        surface = surface_pressure
        sat = state.tissue_inertgas_saturation
        coeff = list(zip(state.buehlmann_inertgas_a, state.buehlmann_inertgas_b))

        data = zip(
            state.tissue_n2_sat, state.tissue_he_sat,
            self.N2_A, self.N2_B, self.HE_A, self.HE_B,
        )
        lowest_ceiling = max(
            eq_gf_limit(gf_low, p_n2, p_he, n2_a, n2_b, he_a, he_b)
            for p_n2, p_he, n2_a, n2_b, he_a, he_b in data
        )
        if lowest_ceiling > state.gf_low_pressure_this_dive:
            state.gf_low_pressure_this_dive = lowest_ceiling
        gf_p = state.gf_low_pressure_this_dive

        limit = 0.0
        for ci, (p, (a, b)) in enumerate(zip(sat, coeff)):
            if (surface / b + a - surface) * gf_high + surface \
                    < (gf_p / b + a - gf_p) * gf_low + gf_p:
                tolerated = (
                    -a * b * (gf_high * gf_p - gf_low * surface)
                    - (1.0 - b) * (gf_high - gf_low) * gf_p * surface
                    + b * (gf_p - surface) * p
                ) / (
                    -a * b * (gf_high - gf_low)
                    + (1.0 - b) * (gf_low * gf_p - gf_high * surface)
                    + b * (gf_p - surface)
                )
            else:
                tolerated = limit

            state.tolerated_by_tissue[ci] = tolerated
            if tolerated >= limit:
                state.ci_pointing_to_guiding_tissue = ci
                limit = tolerated

        return limit


    def gf(self, state, abs_p, surface_pressure):
        """
        Calculate gradient factor value at given pressure.

        The gradient factor changes linearly from *gf low* at the deepest
        *gf low* ceiling to *gf high* at the surface.

        :param state: Decompression model state.
        :param abs_p: Absolute pressure [bar].
        :param surface_pressure: Surface pressure [bar].
        """
        gf_p = state.gf_low_pressure_this_dive
        if gf_p > surface_pressure:
            return max(
                self.gf_low,
                (abs_p - surface_pressure) / (gf_p - surface_pressure)
                    * (self.gf_low - self.gf_high) + self.gf_high
            )
        return self.gf_low


    def _coefficients(self, state):
        """
        Calculate Buhlmann coefficients of tissue compartments for current
        mix of inert gases.
        """
        data = zip(
            state.tissue_n2_sat, state.tissue_he_sat,
            self.N2_A, self.N2_B, self.HE_A, self.HE_B,
        )
        for ci, (p_n2, p_he, n2_a, n2_b, he_a, he_b) in enumerate(data):
            p = p_n2 + p_he
            state.buehlmann_inertgas_a[ci] = (n2_a * p_n2 + he_a * p_he) / p
            state.buehlmann_inertgas_b[ci] = (n2_b * p_n2 + he_b * p_he) / p


    def _k_const(self, half_life):
        """
        Calculate gas decay constant :math:`k` for each tissue compartment
        half-life value.

        :param half_life: Collection of half-life values for each tissue
            compartment.
        """
        return tuple(const.LOG_2 / v for v in half_life)


    def _exp(self, time, k):
        """
        Calculate value of exponential function for time and gas decay
        constant :math:`k`.

        :param time: Time of exposure [min].
        :param k: Gas decay constant :math:`k` for a tissue compartment.
        """
        return math.exp(-k * time)


    def _factor(self, time, k):
        """
        Calculate fraction of inert gas pressure difference loaded into
        tissue compartment.

        :param time: Time of exposure [s].
        :param k: Gas decay constant :math:`k` for a tissue compartment.
        """
        return 1.0 - self._exp(time / 60, k)



class ZH_L16B_GF(ZH_L16_GF): # source: gfdeco.f by Baker
    """
    ZH-L16B-GF decompression model.
    """
    N2_A = (
        1.1696, 1.0000, 0.8618, 0.7562, 0.6667, 0.5600, 0.4947, 0.4500,
        0.4187, 0.3798, 0.3497, 0.3223, 0.2850, 0.2737, 0.2523, 0.2327,
    )
    N2_B = (
        0.5578, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
        0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653,
    )
    HE_A = (
        1.6189, 1.3830, 1.1919, 1.0458, 0.9220, 0.8205, 0.7305, 0.6502,
        0.5950, 0.5545, 0.5333, 0.5189, 0.5181, 0.5176, 0.5172, 0.5119,
    )
    HE_B = (
        0.4770, 0.5747, 0.6527, 0.7223, 0.7582, 0.7957, 0.8279, 0.8553,
        0.8757, 0.8903, 0.8997, 0.9073, 0.9122, 0.9171, 0.9217, 0.9267,
    )
    N2_HALF_LIFE = (
        5.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0, 109.0,
        146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0,
    )
    HE_HALF_LIFE = (
        1.88, 3.02, 4.72, 6.99, 10.21, 14.48, 20.53, 29.11,
        41.20, 55.19, 70.69, 90.34, 115.29, 147.42, 188.24, 240.03,
    )



class ZH_L16C_GF(ZH_L16_GF): # source: ostc firmware code
    """
    ZH-L16C-GF decompression model.
    """
    N2_A = (
        1.2599, 1.0000, 0.8618, 0.7562, 0.6200, 0.5043, 0.4410, 0.4000,
        0.3750, 0.3500, 0.3295, 0.3065, 0.2835, 0.2610, 0.2480, 0.2327,
    )
    N2_B = (
        0.5050, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
        0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653,
    )
    HE_A = (
        1.7424, 1.3830, 1.1919, 1.0458, 0.9220, 0.8205, 0.7305, 0.6502,
        0.5950, 0.5545, 0.5333, 0.5189, 0.5181, 0.5176, 0.5172, 0.5119,
    )
    HE_B = (
        0.4245, 0.5747, 0.6527, 0.7223, 0.7582, 0.7957, 0.8279, 0.8553,
        0.8757, 0.8903, 0.8997, 0.9073, 0.9122, 0.9171, 0.9217, 0.9267,
    )
    N2_HALF_LIFE = (
        4.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0, 109.0,
        146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0,
    )
    HE_HALF_LIFE = (
        1.51, 3.02, 4.72, 6.99, 10.21, 14.48, 20.53, 29.11, 41.20,
        55.19, 70.69, 90.34, 115.29, 147.42, 188.24, 240.03,
    )



class VPMB(ZH_L16B_GF):
    """
    VPM-B decompression model.

    The model uses ZH-L16B tissue compartments half-life values. The
    Buhlmann coefficients are used for saturation percentages and gradient
    factor information only.

    :var conservatism: Conservatism level (0-4).
    """
    DECO_MODE = DecoMode.VPMB

    CONSERVATISM_LEVELS = (1.0, 1.05, 1.12, 1.22, 1.35)
    CRIT_RADIUS_N2 = 0.55           # um
    CRIT_RADIUS_HE = 0.45           # um
    CRIT_VOLUME_LAMBDA = 199.58     # bar * min
    GRADIENT_OF_IMPERM = 8.30865    # bar
    SURFACE_TENSION_GAMMA = 0.18137175  # bar * um
    SKIN_COMPRESSION_GAMMAC = 2.6040525 # bar * um
    REGENERATION_TIME = 20160.0     # min
    OTHER_GASES_PRESSURE = 0.1359888    # bar
    SURFACE_N2_FRACTION = 0.79
    TOLERANCE_PRECISION = 0.01      # bar
    MAX_TOLERANCE_ITERATIONS = 100

    def __init__(self, gf_low=0.3, gf_high=0.75, conservatism=3):
        """
        Create instance of the model.

        :param gf_low: Gradient factor low parameter.
        :param gf_high: Gradient factor high parameter.
        :param conservatism: Conservatism level (0-4).
        """
        super().__init__(gf_low, gf_high)
        self.conservatism = conservatism


    @property
    def crit_radius_n2(self):
        return self.CRIT_RADIUS_N2 * self.CONSERVATISM_LEVELS[self.conservatism]


    @property
    def crit_radius_he(self):
        return self.CRIT_RADIUS_HE * self.CONSERVATISM_LEVELS[self.conservatism]


    def load(self, state, abs_p, gasmix, time, po2, divemode, prefs):
        """
        Load all tissue compartments with inert gas and track crushing
        pressure of gas nuclei.

        .. seealso:: :py:meth:`ZH_L16_GF.load`
        """
        super().load(state, abs_p, gasmix, time, po2, divemode, prefs)
        self._crushing_pressure(state, abs_p)


    def tolerance(self, state, abs_p, surface_pressure):
        """
        Calculate tolerated ambient pressure [bar].

        The Boyle law compensated gradients depend on ambient pressure,
        therefore the calculation is repeated until reference pressure
        is within 0.01 bar of the tolerated pressure.

        :param state: Decompression model state.
        :param abs_p: Absolute pressure of current depth [bar].
        :param surface_pressure: Surface pressure [bar].
        """
        self._coefficients(state)

        limit = abs_p
        for k in range(self.MAX_TOLERANCE_ITERATIONS):
            reference = limit
            limit = 0.0
            for ci in range(self.NUM_COMPARTMENTS):
                tolerated = self._tolerated(state, reference, ci)
                if tolerated >= limit:
                    state.ci_pointing_to_guiding_tissue = ci
                    limit = tolerated
                state.tolerated_by_tissue[ci] = tolerated
            if abs(limit - reference) <= self.TOLERANCE_PRECISION:
                break
        else:
            logger.info('vpm-b tolerance did not converge at {:.4f}bar'.format(abs_p))

        return limit


    def start_gradient(self, state):
        """
        Calculate initial allowed supersaturation gradients using
        regenerated nuclei radii.

        :param state: Decompression model state.
        """
        gamma = self.SURFACE_TENSION_GAMMA
        gammac = self.SKIN_COMPRESSION_GAMMAC
        for ci in range(self.NUM_COMPARTMENTS):
            g = 2.0 * (gamma / gammac) * ((gammac - gamma) / state.n2_regen_radius[ci])
            state.initial_n2_gradient[ci] = state.bottom_n2_gradient[ci] = g
            g = 2.0 * (gamma / gammac) * ((gammac - gamma) / state.he_regen_radius[ci])
            state.initial_he_gradient[ci] = state.bottom_he_gradient[ci] = g


    def next_gradient(self, state, deco_time, surface_pressure):
        """
        Calculate allowed supersaturation gradients for total
        decompression time using critical volume algorithm.

        :param state: Decompression model state.
        :param deco_time: Total decompression time [s].
        :param surface_pressure: Surface pressure [bar].
        """
        gamma = self.SURFACE_TENSION_GAMMA
        gammac = self.SKIN_COMPRESSION_GAMMAC
        lambda_ = self.CRIT_VOLUME_LAMBDA
        deco_time = deco_time / 60

        for ci in range(self.NUM_COMPARTMENTS):
            desat_time = deco_time + self._surface_phase(
                surface_pressure,
                state.tissue_he_sat[ci], state.tissue_n2_sat[ci],
                self.he_k_const[ci], self.n2_k_const[ci],
            )
            if desat_time <= 0:
                continue

            n2_b = state.initial_n2_gradient[ci] \
                + lambda_ * gamma / (gammac * desat_time)
            he_b = state.initial_he_gradient[ci] \
                + lambda_ * gamma / (gammac * desat_time)
            n2_c = gamma * gamma * lambda_ * state.max_n2_crushing_pressure[ci] \
                / (gammac * gammac * desat_time)
            he_c = gamma * gamma * lambda_ * state.max_he_crushing_pressure[ci] \
                / (gammac * gammac * desat_time)

            state.bottom_n2_gradient[ci] = 0.5 * (n2_b + math.sqrt(n2_b * n2_b - 4.0 * n2_c))
            state.bottom_he_gradient[ci] = 0.5 * (he_b + math.sqrt(he_b * he_b - 4.0 * he_c))


    def nuclear_regeneration(self, state, time):
        """
        Calculate radii of gas nuclei regenerated after being crushed.

        :param state: Decompression model state.
        :param time: Dive time [s].
        """
        time = time / 60
        b = 2.0 * (self.SKIN_COMPRESSION_GAMMAC - self.SURFACE_TENSION_GAMMA)
        regen = 1.0 - math.exp(-time / self.REGENERATION_TIME)
        r_n2 = self.crit_radius_n2
        r_he = self.crit_radius_he
        for ci in range(self.NUM_COMPARTMENTS):
            crushing_n2 = 1.0 / (state.max_n2_crushing_pressure[ci] / b + 1.0 / r_n2)
            crushing_he = 1.0 / (state.max_he_crushing_pressure[ci] / b + 1.0 / r_he)
            state.n2_regen_radius[ci] = crushing_n2 + (r_n2 - crushing_n2) * regen
            state.he_regen_radius[ci] = crushing_he + (r_he - crushing_he) * regen


    def _tolerated(self, state, reference, ci):
        """
        Calculate tolerated ambient pressure of a tissue compartment.

        :param state: Decompression model state.
        :param reference: Reference ambient pressure [bar].
        :param ci: Tissue compartment index.
        """
        first_ceiling = state.first_ceiling_pressure / 1000
        if not state.first_ceiling_pressure or reference >= first_ceiling:
            n2_gradient = state.bottom_n2_gradient[ci]
            he_gradient = state.bottom_he_gradient[ci]
        else:
            n2_gradient = self._update_gradient(
                state, reference, state.bottom_n2_gradient[ci]
            )
            he_gradient = self._update_gradient(
                state, reference, state.bottom_he_gradient[ci]
            )

        p_n2 = state.tissue_n2_sat[ci]
        p_he = state.tissue_he_sat[ci]
        gradient = (n2_gradient * p_n2 + he_gradient * p_he) / (p_n2 + p_he)
        return p_n2 + p_he + self.OTHER_GASES_PRESSURE - gradient


    def _update_gradient(self, state, pressure, first_gradient):
        """
        Calculate Boyle law compensated gradient.

        :param state: Decompression model state.
        :param pressure: Ambient pressure [bar].
        :param first_gradient: Gradient at the first ceiling.
        """
        if first_gradient <= 0:
            return 0.0
        b = first_gradient ** 3 / (state.first_ceiling_pressure / 1000 + first_gradient)
        c = pressure * b
        return solve_cubic(b, c)


    def _surface_phase(self, surface_pressure, p_he, p_n2, he_k, n2_k):
        """
        Calculate desaturation time integral of surface phase after a dive
        [min].
        """
        inspired_n2 = (surface_pressure - self.water_vapour_pressure) \
            * self.SURFACE_N2_FRACTION

        if p_n2 > inspired_n2:
            return (p_he / he_k + (p_n2 - inspired_n2) / n2_k) \
                / (p_he + p_n2 - inspired_n2)

        if p_he > 0 and p_he + p_n2 >= inspired_n2:
            decay_time = 1.0 / (n2_k - he_k) * math.log((inspired_n2 - p_n2) / p_he)
            integral = p_he / he_k * (1.0 - math.exp(-he_k * decay_time)) \
                + (p_n2 - inspired_n2) / n2_k * (1.0 - math.exp(-n2_k * decay_time))
            return integral / (p_he + p_n2 - inspired_n2)

        return 0.0


    def _crushing_pressure(self, state, abs_p):
        """
        Track max crushing pressure of gas nuclei of each tissue
        compartment.

        :param state: Decompression model state.
        :param abs_p: Ambient pressure [bar].
        """
        for ci in range(self.NUM_COMPARTMENTS):
            tension = state.tissue_n2_sat[ci] + state.tissue_he_sat[ci] \
                + self.OTHER_GASES_PRESSURE
            gradient = abs_p - tension

            if gradient <= self.GRADIENT_OF_IMPERM:
                n2_crushing = he_crushing = gradient
                state.crushing_onset_tension[ci] = tension
            else:
                if state.max_ambient_pressure >= abs_p:
                    return
                onset = state.crushing_onset_tension[ci]
                n2_crushing = abs_p - self._inner_pressure(
                    self.crit_radius_n2, onset, abs_p
                )
                he_crushing = abs_p - self._inner_pressure(
                    self.crit_radius_he, onset, abs_p
                )

            state.max_n2_crushing_pressure[ci] = max(
                state.max_n2_crushing_pressure[ci], n2_crushing
            )
            state.max_he_crushing_pressure[ci] = max(
                state.max_he_crushing_pressure[ci], he_crushing
            )
        state.max_ambient_pressure = max(abs_p, state.max_ambient_pressure)


    def _inner_pressure(self, crit_radius, onset_tension, abs_p):
        """
        Calculate gas pressure inside of impermeable gas nucleus.

        The nucleus radius is root of :math:`A r^3 - B r^2 - C = 0`
        found with bisection.

        :param crit_radius: Critical radius of gas nucleus [um].
        :param onset_tension: Gas tension at the onset of impermeability.
        :param abs_p: Ambient pressure [bar].
        """
        b = 2.0 * (self.SKIN_COMPRESSION_GAMMAC - self.SURFACE_TENSION_GAMMA)
        onset_radius = 1.0 / (self.GRADIENT_OF_IMPERM / b + 1.0 / crit_radius)
        a = abs_p - self.GRADIENT_OF_IMPERM + b / onset_radius
        c = onset_tension * onset_radius ** 3

        low = b / a
        high = onset_radius
        for k in range(100):
            radius = (low + high) / 2
            f = a * radius ** 3 - b * radius ** 2 - c
            if f < 0:
                low = radius
            else:
                high = radius
            if high - low < 1e-12:
                break
        radius = (low + high) / 2
        return onset_tension * onset_radius ** 3 / radius ** 3



def solve_cubic(b, c):
    """
    Find positive root of :math:`x^3 - B x - C = 0` equation.

    :param b: Coefficient B.
    :param c: Coefficient C.
    """
    discriminant = 27 * c * c - 4 * b ** 3
    if discriminant < 0:
        return 2.0 * math.sqrt(b / 3.0) \
            * math.cos(math.acos(min(1.0, 3.0 * c * math.sqrt(3.0 / b) / (2.0 * b))) / 3.0)

    denominator = (9 * c + math.sqrt(3 * discriminant)) ** (1 / 3)
    return (2.0 / 3.0) ** (1 / 3) * b / denominator + denominator / 18.0 ** (1 / 3)


def model_class(prefs):
    """
    Get class of decompression model selected by analysis preferences.

    :param prefs: Analysis preferences.
    """
    return VPMB if prefs.deco_mode == DecoMode.VPMB else ZH_L16C_GF


def create_model(prefs):
    """
    Create decompression model using analysis preferences.

    :param prefs: Analysis preferences.
    """
    cls = model_class(prefs)
    gf_low = prefs.gf_low / 100
    gf_high = prefs.gf_high / 100
    if cls is VPMB:
        return VPMB(gf_low, gf_high, prefs.vpmb_conservatism)
    return cls(gf_low, gf_high)


# vim: sw=4:et:ai
