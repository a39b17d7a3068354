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
Extrema of a dive.

The limits are calculated using samples of all dive computers of a dive.
Max time covers all events and the first sample after the last event, so
the dense profile includes all of them.
"""

from collections import namedtuple
import logging

from .dive import DiveType
from .profile import round_up
from . import const

logger = logging.getLogger(__name__)

Limits = namedtuple(
    'Limits',
    'maxdepth maxtime maxpressure minpressure mintemp maxtemp minhr maxhr'
)
Limits.__doc__ = """
Extrema of a dive.

:var maxdepth: Max depth [mm].
:var maxtime: Max time [s].
:var maxpressure: Max cylinder pressure [mbar].
:var minpressure: Min non-zero cylinder pressure [mbar], zero if unknown.
:var mintemp: Min temperature [mK], zero if unknown.
:var maxtemp: Max temperature [mK].
:var minhr: Min heart rate.
:var maxhr: Max heart rate.
"""


def calculate_max_limits(dive, dc):
    """
    Calculate extrema of a dive.

    The analysed dive computer is included even if it does not belong to
    the dive.

    :param dive: Dive information.
    :param dc: Analysed dive computer.
    """
    maxdepth = dive.maxdepth
    maxtime = 0
    maxpressure = 0
    minpressure = None
    maxhr = 0
    minhr = None
    mintemp = dive.mintemp
    maxtemp = dive.maxtemp
    found_sample_beyond_last_event = False

    for cyl in dive.cylinders:
        maxpressure = max(maxpressure, cyl.start)
        if cyl.end and (minpressure is None or cyl.end < minpressure):
            minpressure = cyl.end

    dcs = list(dive.dcs)
    if dc not in dcs:
        dcs.append(dc)

    for item in dcs:
        for ev in item.events:
            maxtime = max(maxtime, ev.time)

        lastdepth = 0
        for s in item.samples:
            for p in s.pressure:
                if p and (minpressure is None or p < minpressure):
                    minpressure = p
                maxpressure = max(maxpressure, p)

            t = s.temperature
            if t and (not mintemp or t < mintemp):
                mintemp = t
            maxtemp = max(maxtemp, t)

            hr = s.heartbeat
            maxhr = max(maxhr, hr)
            if hr and (minhr is None or hr < minhr):
                minhr = hr

            maxdepth = max(maxdepth, s.depth)

            below = s.depth > const.SURFACE_THRESHOLD \
                or lastdepth > const.SURFACE_THRESHOLD
            if (below or not found_sample_beyond_last_event) and s.time > maxtime:
                found_sample_beyond_last_event = True
                maxtime = s.time
            lastdepth = s.depth

    if minpressure is None or minpressure > maxpressure:
        minpressure = 0
    if minhr is None or minhr > maxhr:
        minhr = maxhr

    limits = Limits(
        maxdepth, maxtime, maxpressure, minpressure, mintemp, maxtemp,
        minhr, maxhr
    )
    if __debug__:
        logger.debug('dive limits: {}'.format(limits))
    return limits


def get_maxtime(pi, prefs):
    """
    Get max time of plot time axis [s].

    The max time is rounded up to a minute (or 30 seconds for freediving)
    leaving space after the end of a dive.

    :param pi: Dense dive profile.
    :param prefs: Analysis preferences.
    """
    seconds = pi.maxtime
    freediving = pi.dive_type == DiveType.FREEDIVING
    duration_thr = 60 if freediving else 600
    ceiling = 30 if freediving else 60

    if prefs.zoomed_plot:
        if seconds < duration_thr:
            return round_up(seconds + seconds // 4, ceiling)
        return round_up(seconds + duration_thr // 4, ceiling)
    return max(30 * 60, round_up(seconds + duration_thr // 4, ceiling * 5))


def get_maxdepth(pi, prefs):
    """
    Get max depth of plot depth axis [mm].

    The depth is rounded up to 10m with at least 3m to spare. Space for
    partial pressure graph is added below the max depth.

    :param pi: Dense dive profile.
    :param prefs: Analysis preferences.
    """
    md = round_up(pi.maxdepth + 3000, 10000)
    if not prefs.zoomed_plot:
        md = max(30000, md)
    return md + round(pi.maxpp * 9000)


# vim: sw=4:et:ai
