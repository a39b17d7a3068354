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
Profile analysis preferences and display units.

The preferences are plain attribute objects with default values set by
constructor. Override the attributes after creating the object, i.e.::

    >>> prefs = Preferences()
    >>> prefs.deco_mode = DecoMode.VPMB
    >>> prefs.vpmb_conservatism = 2
    >>> prefs.validate()

The preferences are validated by decompression engine on its creation.
"""

import logging

from .error import ConfigError

logger = logging.getLogger(__name__)


class DecoMode(object):
    """
    Decompression model enumeration.

    BUEHLMANN
        Buhlmann ZH-L16 decompression model with gradient factors.
    VPMB
        Varying permeability model with Boyle law compensation.
    """
    BUEHLMANN = 'buehlmann'
    VPMB = 'vpmb'



class Units(object):
    """
    Display units.

    :var length: Length units, `meters` or `feet`.
    :var pressure: Pressure units, `bar` or `psi`.
    :var temperature: Temperature units, `celsius` or `fahrenheit`.
    :var volume: Volume units, `liter` or `cuft`.
    :var vertical_speed_time: Vertical speed time units, `minutes` or
        `seconds`.
    """
    METERS = 'meters'
    FEET = 'feet'
    BAR = 'bar'
    PSI = 'psi'
    CELSIUS = 'celsius'
    FAHRENHEIT = 'fahrenheit'
    LITER = 'liter'
    CUFT = 'cuft'
    MINUTES = 'minutes'
    SECONDS = 'seconds'

    def __init__(self, length=METERS, pressure=BAR, temperature=CELSIUS,
            volume=LITER, vertical_speed_time=MINUTES):
        self.length = length
        self.pressure = pressure
        self.temperature = temperature
        self.volume = volume
        self.vertical_speed_time = vertical_speed_time


    @classmethod
    def imperial(cls):
        """
        Create imperial display units.
        """
        return cls(cls.FEET, cls.PSI, cls.FAHRENHEIT, cls.CUFT)



class Preferences(object):
    """
    Profile analysis preferences.

    :var zoomed_plot: Use minimal padding of time and depth axes.
    :var deco_mode: Decompression model, see :py:class:`DecoMode`.
    :var gf_low: Gradient factor low [%].
    :var gf_high: Gradient factor high [%].
    :var vpmb_conservatism: VPM-B conservatism level (0-4).
    :var ascrate75: Ascent rate below 75% of average depth [mm/s].
    :var ascrate50: Ascent rate between 75% and 50% of average depth [mm/s].
    :var ascratestops: Ascent rate between 50% of average depth and 6m
        [mm/s].
    :var ascratelast6m: Ascent rate in the last 6m [mm/s].
    :var calc_ceiling_3m: Round ceiling to 3m.
    :var calc_ndl_tts: Calculate NDL and TTS for each entry.
    :var calc_all_tissues: Show ceiling of each tissue compartment.
    :var decoinfo: Show decompression information.
    :var mod_po2: Oxygen partial pressure used for MOD [bar].
    :var pp_po2: Show oxygen partial pressure.
    :var pp_pn2: Show nitrogen partial pressure.
    :var pp_phe: Show helium partial pressure.
    :var show_sac: Show SAC rate.
    :var mod: Show MOD.
    :var ead: Show EAD, END, EADD and gas density.
    :var hrgraph: Show heart rate.
    :var o2_consumption: Oxygen consumption for PSCR [ml/min].
    :var bottom_sac: SAC rate used for PSCR [ml/min].
    :var pscr_ratio: PSCR dump ratio [permille], i.e. 100 is 1:10.
    :var units: Display units.
    """
    def __init__(self):
        self.zoomed_plot = False
        self.deco_mode = DecoMode.BUEHLMANN
        self.gf_low = 30
        self.gf_high = 75
        self.vpmb_conservatism = 3

        self.ascrate75 = 9000 // 60
        self.ascrate50 = 9000 // 60
        self.ascratestops = 9000 // 60
        self.ascratelast6m = 9000 // 60

        self.calc_ceiling_3m = False
        self.calc_ndl_tts = False
        self.calc_all_tissues = False
        self.decoinfo = True

        self.mod_po2 = 1.6
        self.pp_po2 = False
        self.pp_pn2 = False
        self.pp_phe = False
        self.show_sac = False
        self.mod = False
        self.ead = False
        self.hrgraph = False

        self.o2_consumption = 720
        self.bottom_sac = 20000
        self.pscr_ratio = 100

        self.units = Units()


    def validate(self):
        """
        Validate the preferences.

        :py:exc:`ConfigError` is raised on invalid preference value.
        """
        if self.deco_mode not in (DecoMode.BUEHLMANN, DecoMode.VPMB):
            raise ConfigError('Unknown decompression model {}'.format(self.deco_mode))

        if not 0 < self.gf_low <= 150:
            raise ConfigError('Invalid gradient factor low {}'.format(self.gf_low))
        if not 0 < self.gf_high <= 150:
            raise ConfigError('Invalid gradient factor high {}'.format(self.gf_high))
        if self.gf_low > self.gf_high:
            raise ConfigError(
                'Gradient factor low {} greater than gradient factor high {}'
                .format(self.gf_low, self.gf_high)
            )

        if not 0 <= self.vpmb_conservatism <= 4:
            raise ConfigError(
                'Invalid VPM-B conservatism level {}'.format(self.vpmb_conservatism)
            )

        rates = (self.ascrate75, self.ascrate50, self.ascratestops,
            self.ascratelast6m)
        if any(r <= 0 for r in rates):
            raise ConfigError('Ascent rate has to be positive: {}'.format(rates))

        if self.mod_po2 <= 0:
            raise ConfigError('Invalid MOD oxygen pressure {}'.format(self.mod_po2))

        if self.bottom_sac <= 0 or self.pscr_ratio <= 0:
            raise ConfigError('Invalid PSCR configuration')


# vim: sw=4:et:ai
