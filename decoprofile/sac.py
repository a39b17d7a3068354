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
Surface air consumption (SAC) rate.

The SAC rate of a profile entry is calculated using pressure drop of the
cylinders with the gas mix in use over a window of about 90 seconds around
the entry. The window is shortened when diver is at the surface or when
the set of the cylinders with pressure data changes.
"""

import logging

from .gas import same_gasmix, gas_volume
from . import const

logger = logging.getLogger(__name__)


def matching_gases(dive, gasmix):
    """
    Get indexes of cylinders with given gas mix.

    :param dive: Dive information.
    :param gasmix: Gas mix.
    """
    return frozenset(
        i for i, cyl in enumerate(dive.cylinders)
        if same_gasmix(gasmix, cyl.gasmix)
    )


def filter_pressures(entry, gases):
    """
    Get indexes of cylinders with pressure data at a profile entry.

    :param entry: Profile entry.
    :param gases: Indexes of cylinders.
    """
    return frozenset(i for i in gases if entry.get_pressure(i))


def sac_between(dive, entries, first, last, gases):
    """
    Calculate SAC rate between two profile entries [ml/min].

    Only cylinders with positive gas use are taken into account. Zero is
    returned if no gas is used.

    :param dive: Dive information.
    :param entries: Profile entries.
    :param first: Index of first entry.
    :param last: Index of last entry.
    :param gases: Indexes of cylinders.
    """
    if first == last:
        return 0

    airuse = 0
    for i in gases:
        cyl = dive.cylinders[i]
        a = entries[first].get_pressure(i)
        b = entries[last].get_pressure(i)
        cyluse = gas_volume(cyl, a) - gas_volume(cyl, b)
        if cyluse > 0:
            airuse += cyluse
    if not airuse:
        return 0

    pressuretime = 0.0
    for entry, nxt in zip(entries[first:last], entries[first + 1:last + 1]):
        depth = (entry.depth + nxt.depth) // 2
        pressuretime += dive.depth_to_atm(depth) * (nxt.sec - entry.sec)
    pressuretime /= 60

    if pressuretime <= 0:
        return 0
    return round(airuse / pressuretime)


def _surfaced(a, b):
    return a.depth < const.SURFACE_THRESHOLD and b.depth < const.SURFACE_THRESHOLD


def fill_sac(dive, entries, idx, gases_in):
    """
    Calculate SAC rate of a profile entry.

    SAC rate recorded by a dive computer is kept.

    :param dive: Dive information.
    :param entries: Profile entries.
    :param idx: Index of profile entry.
    :param gases_in: Indexes of cylinders with gas mix in use.
    """
    entry = entries[idx]
    if entry.sac:
        return

    gases = filter_pressures(entry, gases_in)
    if not gases:
        return

    first = idx
    time = entry.sec - const.SAC_WINDOW_BEFORE
    while first > 0:
        prev = entries[first - 1]
        if _surfaced(prev, entries[first]):
            break
        if prev.sec < time:
            break
        if filter_pressures(prev, gases_in) != gases:
            break
        first -= 1

    last = first
    time = entries[first].sec + const.SAC_WINDOW_AFTER
    while last + 1 < len(entries):
        nxt = entries[last + 1]
        if _surfaced(entries[last], nxt):
            break
        if nxt.sec > time:
            break
        if filter_pressures(nxt, gases_in) != gases:
            break
        last += 1

    entry.sac = sac_between(dive, entries, first, last, gases)


def calculate_sac(ctx, entries):
    """
    Calculate SAC rate of each profile entry.

    :param ctx: Analysis context.
    :param entries: Profile entries.
    """
    dive = ctx.dive
    gasmixes = ctx.gasmix_loop()
    gasmix = None
    gases = frozenset()
    for idx, entry in enumerate(entries):
        newmix = gasmixes.next(entry.sec)
        if gasmix is None or not same_gasmix(newmix, gasmix):
            gasmix = newmix
            gases = matching_gases(dive, gasmix)
            if __debug__:
                logger.debug('sac cylinders at {}s: {}'.format(entry.sec, sorted(gases)))
        fill_sac(dive, entries, idx, gases)


# vim: sw=4:et:ai
