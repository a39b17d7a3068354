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
Gas mix calculations.

Gas mix is described with fractions of oxygen and helium in permille,
the rest is nitrogen. Oxygen fraction equal to zero means air, which
allows dive computers to skip gas mix information for air dives

    >>> mix = GasMix(320, 0)
    >>> get_o2(mix), get_he(mix), get_n2(mix)
    (320, 0, 680)
    >>> gasname(GasMix(0, 0))
    'air'
    >>> gasname(GasMix(180, 450))
    '18/45'

The partial pressures of gases in breathing loop depend on dive mode, see
:func:`fill_pressures` for details.
"""

from collections import namedtuple
import logging

from . import const

logger = logging.getLogger(__name__)

GasMix = namedtuple('GasMix', 'o2 he')
GasMix.__doc__ = """
Gas mix configuration.

:var o2: O2 fraction [permille], zero for air.
:var he: Helium fraction [permille].
"""

GasPressures = namedtuple('GasPressures', 'o2 he n2')
GasPressures.__doc__ = """
Partial pressures of breathing gas components [bar].
"""

GASMIX_AIR = GasMix(0, 0)
GASMIX_INVALID = GasMix(-1, -1)

# virial coefficients of compressibility factor of O2, N2 and He
O2_COEFFICIENTS = (-7.18092073703e-04, 2.81852572808e-06, -1.50290620492e-09)
N2_COEFFICIENTS = (2.19260353292e-04, 2.92844845532e-06, -2.07613482075e-09)
HE_COEFFICIENTS = (4.87320026468e-04, -8.83632921053e-08, 5.33304543646e-11)


class DiveMode(object):
    """
    Dive mode enumeration.

    OC
        Open circuit.
    CCR
        Closed circuit rebreather, oxygen pressure is known from setpoint or
        oxygen sensors.
    PSCR
        Passive semi-closed rebreather.
    FREEDIVE
        Breath hold dive.
    """
    OC = 'oc'
    CCR = 'ccr'
    PSCR = 'pscr'
    FREEDIVE = 'freedive'

    # index used by "modechange" events
    ALL = (OC, CCR, PSCR, FREEDIVE)


def get_o2(mix):
    """
    Get O2 fraction of a gas mix [permille].

    :param mix: Gas mix.
    """
    return mix.o2 or const.O2_IN_AIR


def get_he(mix):
    """
    Get helium fraction of a gas mix [permille].

    :param mix: Gas mix.
    """
    return mix.he


def get_n2(mix):
    """
    Get nitrogen fraction of a gas mix [permille].

    :param mix: Gas mix.
    """
    return 1000 - get_o2(mix) - get_he(mix)


def gasmix_is_invalid(mix):
    return mix.o2 < 0


def gasmix_is_air(mix):
    o2 = mix.o2
    return mix.he == 0 and (o2 == 0 or const.O2_IN_AIR - 1 <= o2 <= const.O2_IN_AIR + 1)


def same_gasmix(a, b):
    """
    Check if two gas mixes are the same.

    Invalid gas mix is never the same as any other gas mix.

    :param a: Gas mix.
    :param b: Gas mix.
    """
    if gasmix_is_invalid(a) or gasmix_is_invalid(b):
        return False
    return get_o2(a) == get_o2(b) and get_he(a) == get_he(b)


def gasname(mix):
    """
    Get human readable name of a gas mix.

    :param mix: Gas mix.
    """
    if gasmix_is_air(mix):
        return 'air'
    o2 = get_o2(mix)
    he = get_he(mix)
    if he == 0 and o2 < 1000:
        return 'EAN{}'.format((o2 + 5) // 10)
    if he == 0 and o2 == 1000:
        return 'oxygen'
    return '{}/{}'.format((o2 + 5) // 10, (he + 5) // 10)


def fill_pressures(amb_pressure, mix, po2, divemode, prefs):
    """
    Calculate partial pressures of O2, He and N2 in breathing gas.

    The calculation depends on dive mode

    - rebreather (CCR, PSCR) with known oxygen pressure: pO2 is given, the
      rest of ambient pressure is shared by He and N2 using diluent ratio;
      pO2 cannot be higher than ambient pressure
    - PSCR without known oxygen pressure: steady state approximation using
      oxygen consumption, SAC rate and PSCR dump ratio
    - open circuit: partial pressures are gas fractions of ambient pressure

    :param amb_pressure: Ambient pressure [bar].
    :param mix: Gas mix (diluent for rebreathers).
    :param po2: Oxygen pressure in breathing loop [bar], zero if unknown.
    :param divemode: Dive mode.
    :param prefs: Analysis preferences (PSCR parameters).
    """
    o2 = get_o2(mix)
    he = get_he(mix)

    if divemode != DiveMode.OC and po2:
        if po2 >= amb_pressure:
            return GasPressures(amb_pressure, 0.0, 0.0)
        if o2 == 1000:
            return GasPressures(po2, 0.0, 0.0)
        p_he = (amb_pressure - po2) * he / (1000 - o2)
        return GasPressures(po2, p_he, amb_pressure - po2 - p_he)

    if divemode == DiveMode.PSCR:
        p_o2 = o2 / 1000 * amb_pressure - (1.0 - o2 / 1000) \
            * prefs.o2_consumption / (prefs.bottom_sac * prefs.pscr_ratio / 1000)
        p_o2 = max(p_o2, 0.0)
        if o2 == 1000:
            return GasPressures(p_o2, 0.0, 0.0)
        p_he = (amb_pressure - p_o2) * he / (1000 - o2)
        p_n2 = (amb_pressure - p_o2) * (1000 - o2 - he) / (1000 - o2)
        return GasPressures(p_o2, p_he, p_n2)

    return GasPressures(
        o2 / 1000 * amb_pressure,
        he / 1000 * amb_pressure,
        (1000 - o2 - he) / 1000 * amb_pressure,
    )


def _virial(coefficients, x1, x2, x3):
    return coefficients[0] * x1 + coefficients[1] * x2 + coefficients[2] * x3


def gas_compressibility_factor(mix, bar):
    """
    Calculate compressibility factor Z of a gas mix.

    The factor is linear mix of virial polynomials of the gases.

    :param mix: Gas mix.
    :param bar: Gas pressure [bar].
    """
    o2 = get_o2(mix)
    he = get_he(mix)
    x1 = bar
    x2 = x1 * x1
    x3 = x2 * x1

    z = _virial(O2_COEFFICIENTS, x1, x2, x3) * o2 \
        + _virial(HE_COEFFICIENTS, x1, x2, x3) * he \
        + _virial(N2_COEFFICIENTS, x1, x2, x3) * (1000 - o2 - he)

    # linear mix of the 1.0 terms is 1.0 for any gas mix
    return z * 0.001 + 1.0


def gas_volume(cylinder, mbar):
    """
    Calculate surface volume of gas in a cylinder [ml].

    :param cylinder: Cylinder information.
    :param mbar: Cylinder pressure [mbar].
    """
    bar = mbar / 1000
    z = gas_compressibility_factor(cylinder.gasmix, bar)
    return round(cylinder.size * bar * 1000 / const.ATM / z)


def gas_mod(mix, po2_limit, dive, roundto=1):
    """
    Calculate maximum operating depth of a gas mix [mm].

    :param mix: Gas mix.
    :param po2_limit: Maximum oxygen partial pressure [mbar].
    :param dive: Dive information (depth conversion).
    :param roundto: Rounding of the depth [mm].
    """
    depth = dive.mbar_to_depth(po2_limit * 1000 // get_o2(mix))
    return round(depth / roundto) * roundto


def gas_density(pressures):
    """
    Calculate density of breathing gas [g/l].

    :param pressures: Partial pressures of breathing gas [bar].
    """
    density = pressures.o2 * const.O2_DENSITY + pressures.he * const.HE_DENSITY \
        + pressures.n2 * const.N2_DENSITY
    return density / 1000


# vim: sw=4:et:ai
