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
Breathing gas physiology.

The oxygen pressure of rebreather dives is determined with oxygen sensors
data, the missing sensor readings are forward filled. The partial
pressures of breathing gas and equivalent depths are calculated for each
entry of dense profile.
"""

import logging

from .gas import DiveMode, fill_pressures, gas_mod, gas_density, get_o2
from . import const

logger = logging.getLogger(__name__)


def calculate_ccr_po2(entry, no_o2sensors):
    """
    Calculate oxygen pressure of rebreather loop using oxygen sensors
    readings [mbar].

    The sensors vote

    - no valid reading - oxygen pressure of an entry is kept
    - one reading - the reading is used
    - two readings - average of the readings
    - three readings - average of the readings; if the highest or lowest
      reading differs from the middle one by 100 mbar or more, it is
      discarded and the remaining two readings are averaged

    :param entry: Profile entry.
    :param no_o2sensors: Number of oxygen sensors.
    """
    values = [v for v in entry.o2sensor[:no_o2sensors] if v]
    np = len(values)
    if np == 0:
        return entry.o2pressure
    if np == 1:
        return values[0]
    if np == 2:
        return sum(values) // 2

    assert np == 3
    sump = sum(values)
    minp = min(values)
    maxp = max(values)
    mid = sump - minp - maxp
    upper_ok = maxp - mid < const.O2_SENSOR_DIFF_LIMIT
    lower_ok = mid - minp < const.O2_SENSOR_DIFF_LIMIT
    if upper_ok and not lower_ok:
        return (sump - minp) // 2
    if lower_ok and not upper_ok:
        return (sump - maxp) // 2
    return sump // 3


def fill_o2_values(ctx, entries):
    """
    Forward fill missing oxygen sensors readings and calculate oxygen
    pressure of rebreather loop.

    The oxygen pressure is zero for open circuit dives.

    :param ctx: Analysis context.
    :param entries: Profile entries.
    """
    if not ctx.has_o2sensors:
        for entry in entries:
            entry.o2pressure = 0
        return

    n = min(ctx.dc.no_o2sensors, const.MAX_O2_SENSORS)
    last_sensor = list(entries[0].o2sensor[:n])
    for entry in entries[1:]:
        for j in range(n):
            if entry.o2sensor[j]:
                last_sensor[j] = entry.o2sensor[j]
            else:
                entry.o2sensor[j] = last_sensor[j]

    dive = ctx.dive
    for entry in entries:
        amb_pressure = dive.depth_to_mbar(entry.depth)
        entry.o2pressure = min(calculate_ccr_po2(entry, n), amb_pressure)


def calculate_gas_information(ctx, entries):
    """
    Calculate partial pressures of breathing gas, MOD, EAD, END, EADD and
    gas density for each profile entry.

    Max partial pressure of the profile is returned.

    :param ctx: Analysis context.
    :param entries: Profile entries.
    """
    dive = ctx.dive
    prefs = ctx.prefs
    gasmixes = ctx.gasmix_loop()
    divemodes = ctx.divemode_loop()
    mod_po2 = int(prefs.mod_po2 * 1000)
    air_density = const.O2_IN_AIR * const.O2_DENSITY \
        + const.N2_IN_AIR * const.N2_DENSITY
    maxpp = 0.0

    for entry in entries[1:]:
        gasmix = gasmixes.next(entry.sec)
        divemode = divemodes.next(entry.sec)
        mbar = dive.depth_to_mbar(entry.depth)
        amb_pressure = mbar / 1000

        po2 = 0.0 if divemode == DiveMode.OC else entry.o2pressure / 1000
        pressures = fill_pressures(amb_pressure, gasmix, po2, divemode, prefs)
        entry.pressures = pressures
        maxpp = max(maxpp, pressures.o2, pressures.n2, pressures.he)

        fn2 = round(1000 * pressures.n2 / amb_pressure)
        fhe = round(1000 * pressures.he / amb_pressure)
        if ctx.divemode == DiveMode.PSCR:
            entry.scr_oc_po2 = mbar * get_o2(gasmix) // 1000

        density = (pressures.o2 * const.O2_DENSITY
            + pressures.n2 * const.N2_DENSITY
            + pressures.he * const.HE_DENSITY) / amb_pressure

        entry.mod = max(0, gas_mod(gasmix, mod_po2, dive))
        entry.end = max(0, dive.mbar_to_depth(round(mbar * (1000 - fhe) / 1000)))
        entry.ead = max(0, dive.mbar_to_depth(round(mbar * fn2 / const.N2_IN_AIR)))
        entry.eadd = max(0, dive.mbar_to_depth(round(mbar * density / air_density * 1000)))
        entry.density = gas_density(pressures)

    if __debug__:
        logger.debug('max partial pressure: {:.2f}bar'.format(maxpp))
    return maxpp


# vim: sw=4:et:ai
