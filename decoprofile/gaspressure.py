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
Cylinder pressure reconstruction.

Dive computers without pressure sensors do not record cylinder pressure,
but the start and end pressures of cylinders are usually known from a dive
log. The pressures are written into dense profile at start and end of use
of each cylinder. The use of cylinders is determined with gas change events.

The pressure between two known pressure values of a cylinder is unknown.
It can be approximated with linear interpolation, see
:py:func:`fill_interpolated_pressures`. The interpolated values are
stored separately from known pressures.
"""

from collections import namedtuple
import logging

from .dive import explicit_first_cylinder, get_cylinder_index, gasmix_events
from .profile import interpolate

logger = logging.getLogger(__name__)

CylinderUse = namedtuple('CylinderUse', 'first last interesting')
CylinderUse.__doc__ = """
Use of a cylinder by analysed dive computer.

:var first: Time of first use of the cylinder [s].
:var last: Time of last use of the cylinder [s], `None` if the cylinder is
    used till the end of the dive.
:var interesting: True if the cylinder has pressure information.
"""


def has_gaschange_event(dive, dc, idx):
    """
    Check if a dive computer switches to a cylinder.

    :param dive: Dive information.
    :param dc: Dive computer.
    :param idx: Cylinder index.
    """
    return any(get_cylinder_index(dive, ev) == idx for ev in gasmix_events(dc))


def setup_gas_sensor_pressure(ctx, entries):
    """
    Write known start and end pressures of cylinders into dense profile.

    The start pressure of a cylinder is written at its first use, the end
    pressure at its last use. The pressure is written into the first entry
    at or after the time of use.

    A cylinder is not interesting if its start or end pressure is not
    known or the pressures are equal. A cylinder never marked as used by
    analysed dive computer, but matched by a gas change event of any dive
    computer, is not interesting as well.

    List of cylinder use information is returned.

    :param ctx: Analysis context.
    :param entries: Profile entries.
    """
    dive = ctx.dive
    ncyl = len(dive.cylinders)
    seen = [False] * ncyl
    first = [0] * ncyl
    last = [None] * ncyl

    prev = explicit_first_cylinder(dive, ctx.dc)
    if prev < ncyl:
        seen[prev] = True

    for ev in gasmix_events(ctx.dc):
        cyl = ev.cylinder
        if cyl < 0 or cyl >= ncyl or cyl == prev:
            continue

        if prev < ncyl:
            last[prev] = ev.time
        prev = cyl
        last[cyl] = ev.time
        if not seen[cyl]:
            first[cyl] = ev.time
            seen[cyl] = True

    if prev < ncyl:
        last[prev] = None

    result = []
    for i, cyl in enumerate(dive.cylinders):
        interesting = bool(cyl.start and cyl.end and cyl.start != cyl.end)
        if interesting and not seen[i]:
            dcs = [ctx.dc] + [dc for dc in dive.dcs if dc is not ctx.dc]
            interesting = not any(has_gaschange_event(dive, dc, i) for dc in dcs)
        if interesting:
            add_plot_pressure(entries, first[i], i, cyl.start)
            add_plot_pressure(entries, last[i], i, cyl.end)
        elif __debug__:
            logger.debug('cylinder {} is not interesting'.format(i))
        result.append(CylinderUse(first[i], last[i], interesting))

    return result


def add_plot_pressure(entries, time, cyl, mbar):
    """
    Write cylinder pressure into the first entry at or after given time.

    The pressure is written into the last entry if time is `None` or
    after the end of the profile.

    :param entries: Profile entries.
    :param time: Time [s].
    :param cyl: Cylinder index.
    :param mbar: Cylinder pressure [mbar].
    """
    entry = entries[-1]
    if time is not None:
        entry = next((e for e in entries if e.sec >= time), entry)
    entry.pressure[cyl] = mbar


def fill_interpolated_pressures(entries, ncyl):
    """
    Interpolate cylinder pressure between known pressure values.

    The pressure is interpolated linearly in time and stored as
    interpolated pressure of an entry. The known pressure values are not
    changed.

    :param entries: Profile entries.
    :param ncyl: Number of cylinders.
    """
    for cyl in range(ncyl):
        known = [i for i, e in enumerate(entries) if e.pressure[cyl]]
        for i, j in zip(known, known[1:]):
            start = entries[i]
            end = entries[j]
            whole = end.sec - start.sec
            for entry in entries[i + 1:j]:
                entry.interpolated[cyl] = interpolate(
                    start.pressure[cyl], end.pressure[cyl],
                    entry.sec - start.sec, whole
                )


# vim: sw=4:et:ai
