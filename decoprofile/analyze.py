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
Dense dive profile post-processing.

- depth smoothing with 5-point triangular filter
- vertical speed and its classification
- indexes of min and max depth entries within +/- 4.5 minutes window of
  each entry
"""

import logging

from . import const

logger = logging.getLogger(__name__)


class Velocity(object):
    """
    Vertical velocity classes, ordered by magnitude of speed.
    """
    STABLE = 0
    SLOW = 1
    MODERATE = 2
    FAST = 3
    CRAZY = 4


def velocity(speed):
    """
    Classify vertical speed.

    Ascent is negative, descent is positive. The limits for descent are
    about two times higher than for ascent.

    :param speed: Vertical speed [mm/s].
    """
    if speed < -304:     # 60ft/min
        return Velocity.CRAZY
    elif speed < -152:   # 30ft/min
        return Velocity.FAST
    elif speed < -76:    # 15ft/min
        return Velocity.MODERATE
    elif speed < -25:    # 5ft/min
        return Velocity.SLOW
    elif speed < 25:
        return Velocity.STABLE
    elif speed < 152:
        return Velocity.SLOW
    elif speed < 304:
        return Velocity.MODERATE
    elif speed < 507:    # 100ft/min
        return Velocity.FAST
    else:
        return Velocity.CRAZY


def div_trunc(a, b):
    """
    Integer division truncated toward zero.
    """
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def analyze_plot_info(entries):
    """
    Calculate smoothed depth and vertical speed of profile entries.

    The first two and the last two entries are not smoothed. If interval
    between two entries is shorter than 15 seconds and the speed is not
    fast, then the speed is classified using the latest entry at least 15
    seconds earlier.

    :param entries: Profile entries.
    """
    nr = len(entries)
    for i in range(2, nr):
        entry = entries[i]
        prev = entries[i - 1]
        if i < nr - 2:
            depth = entries[i - 2].depth + 2 * prev.depth + 3 * entry.depth \
                + 2 * entries[i + 1].depth + entries[i + 2].depth
            entry.smoothed = (depth + 4) // 9

        dt = entry.sec - prev.sec
        if dt:
            entry.speed = div_trunc(entry.depth - prev.depth, dt)
            entry.velocity = velocity(entry.speed)
            if dt < const.SPEED_WINDOW and entry.velocity < Velocity.FAST:
                past = i - 2
                while past > 0 and entry.sec - entries[past].sec < const.SPEED_WINDOW:
                    past -= 1
                dt = entry.sec - entries[past].sec
                if dt:
                    entry.velocity = velocity(
                        div_trunc(entry.depth - entries[past].depth, dt)
                    )
        else:
            entry.speed = 0
            entry.velocity = Velocity.STABLE


def analyze_minmax(entries, half_interval=const.MINMAX_HALF_INTERVAL):
    """
    Find indexes of min and max depth entries within a time window of each
    entry.

    :param entries: Profile entries.
    :param half_interval: Half of the window length [s].
    """
    nr = len(entries)
    for idx, entry in enumerate(entries):
        time = entry.sec
        p = idx
        while p > 0 and entries[p - 1].sec >= time - half_interval:
            p -= 1

        lo = hi = p
        p += 1
        while p < nr and entries[p].sec <= time + half_interval:
            depth = entries[p].depth
            if depth < entries[lo].depth:
                lo = p
            if depth > entries[hi].depth:
                hi = p
            p += 1
        entry.min = lo
        entry.max = hi


# vim: sw=4:et:ai
