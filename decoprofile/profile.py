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
Dense dive profile.

The samples recorded by a dive computer are irregular, i.e. a dive
computer can record samples every 2 seconds or every minute, and events,
i.e. gas changes, happen between samples. The profile analysis works on
dense profile, which has

- an entry at least every 10 seconds with linearly interpolated depth
- an entry for each sample
- an entry at exact time of each event
- two padding entries at the start and at the end of the profile

Each entry is annotated by the analysis steps with partial pressures of
breathing gas, SAC rate, decompression information, etc.
"""

import logging

from .dive import DiveType, GasmixLoop, DivemodeLoop
from .gas import DiveMode, GasPressures
from . import const

logger = logging.getLogger(__name__)


def interpolate(a, b, part, whole):
    """
    Interpolate linearly between `a` and `b`.

    :param a: Start value.
    :param b: End value.
    :param part: Part of the interval.
    :param whole: Length of the interval.
    """
    if not whole:
        return a
    return round((a * (whole - part) + b * part) / whole)


def round_up(x, y):
    """
    Round `x` up to multiple of `y`.
    """
    return (x + y - 1) // y * y



class Entry(object):
    """
    Entry of dense dive profile.

    The time, depth and pressure units are as described in
    :py:mod:`decoprofile.const` module. The partial pressures of breathing
    gas are in bar.
    """
    def __init__(self, ncyl=0, sec=0, depth=0):
        self.sec = sec
        self.depth = depth
        self.smoothed = 0
        self.speed = 0
        self.velocity = 0
        self.min = 0
        self.max = 0
        self.running_sum = 0

        self.pressure = [0] * ncyl
        self.interpolated = [0] * ncyl
        self.temperature = 0
        self.heartbeat = 0
        self.bearing = -1

        self.ambpressure = 0.0
        self.pressures = GasPressures(0.0, 0.0, 0.0)
        self.o2pressure = 0
        self.o2setpoint = 0
        self.o2sensor = [0] * const.MAX_O2_SENSORS
        self.scr_oc_po2 = 0
        self.mod = 0
        self.ead = 0
        self.end = 0
        self.eadd = 0
        self.density = 0.0
        self.sac = 0

        self.ndl = -1
        self.stoptime = 0
        self.stopdepth = 0
        self.tts = 0
        self.in_deco = False
        self.cns = 0
        self.rbt = 0

        self.ceiling = 0
        self.ceilings = [0] * const.NUM_COMPARTMENTS
        self.percentages = [0] * const.NUM_COMPARTMENTS
        self.surface_gf = 0.0
        self.current_gf = 0.0
        self.gfline = 0.0
        self.icd_warning = False
        self.ndl_calc = 0
        self.stoptime_calc = 0
        self.stopdepth_calc = 0
        self.tts_calc = 0
        self.in_deco_calc = False


    def copy(self):
        """
        Create copy of the entry.
        """
        entry = Entry.__new__(Entry)
        entry.__dict__.update(self.__dict__)
        for attr in ('pressure', 'interpolated', 'o2sensor', 'ceilings', 'percentages'):
            setattr(entry, attr, list(getattr(self, attr)))
        return entry


    def get_pressure(self, cyl):
        """
        Get cylinder pressure [mbar].

        The pressure read by a sensor (or known cylinder start and end
        pressure) is returned if available, interpolated pressure
        otherwise.

        :param cyl: Cylinder index.
        """
        return self.pressure[cyl] or self.interpolated[cyl]


    def mean_depth(self):
        """
        Get mean depth of the dive up to the entry [mm].
        """
        return self.running_sum // self.sec if self.sec > 0 else 0


    def __repr__(self):
        return 'Entry(sec={}, depth={}, ceiling={})'.format(
            self.sec, self.depth, self.ceiling
        )



class PlotInfo(object):
    """
    Dense dive profile with its extrema.

    :var entry: List of entries.
    :var maxdepth: Max depth [mm].
    :var maxtime: Max time [s].
    :var maxpressure: Max cylinder pressure [mbar].
    :var minpressure: Min cylinder pressure [mbar].
    :var mintemp: Min temperature [mK].
    :var maxtemp: Max temperature [mK].
    :var minhr: Min heart rate.
    :var maxhr: Max heart rate.
    :var maxpp: Max partial pressure of breathing gas [bar].
    :var meandepth: Mean depth [mm].
    :var dive_type: Dive type, see :py:class:`decoprofile.dive.DiveType`.
    :var event_names: Distinct event names in order of appearance.
    :var iterations: Number of decompression solver iterations.
    """
    def __init__(self, limits=None, dive_type=DiveType.AIR):
        self.entry = []
        self.maxdepth = self.maxtime = 0
        self.maxpressure = self.minpressure = 0
        self.mintemp = self.maxtemp = 0
        self.minhr = self.maxhr = 0
        if limits is not None:
            self.__dict__.update(limits._asdict())
        self.maxpp = 0.0
        self.meandepth = 0
        self.dive_type = dive_type
        self.event_names = []
        self.iterations = 0


    @property
    def nr(self):
        return len(self.entry)


    def __len__(self):
        return len(self.entry)


    def __iter__(self):
        return iter(self.entry)


    def __getitem__(self, idx):
        return self.entry[idx]



class AnalysisContext(object):
    """
    Dive profile analysis context passed to the analysis steps.

    :var dive: Dive information.
    :var dc: Analysed dive computer.
    :var prefs: Analysis preferences.
    :var divemode: Effective dive mode of the analysis.
    :var fast: Skip expensive analysis steps.
    """
    def __init__(self, dive, dc, prefs, fast=False):
        self.dive = dive
        self.dc = dc
        self.prefs = prefs
        self.divemode = dc.divemode
        self.fast = fast


    @property
    def has_o2sensors(self):
        """
        True if O2 sensor data is used for oxygen pressure.
        """
        mode = self.divemode
        return mode == DiveMode.CCR \
            or (mode == DiveMode.PSCR and self.dc.no_o2sensors > 0)


    def gasmix_loop(self):
        """
        Create gas mix cursor for an analysis step.
        """
        return GasmixLoop(self.dive, self.dc)


    def divemode_loop(self):
        """
        Create dive mode cursor for an analysis step.
        """
        return DivemodeLoop(self.dc, self.divemode)



def populate_plot_entries(ctx, maxtime):
    """
    Create dense dive profile entries from samples and events of a dive
    computer.

    `None` is returned if entries cannot be allocated.

    :param ctx: Analysis context.
    :param maxtime: Max time of the profile [s].
    """
    dc = ctx.dc
    ncyl = len(ctx.dive.cylinders)
    nr = len(dc.samples) + 6 + maxtime // const.RASTER + len(dc.events)
    if __debug__:
        logger.debug('profile entries capacity: {}'.format(nr))

    try:
        entries = [Entry(ncyl) for k in range(const.PADDING)]
        _populate(ctx, entries, maxtime)
    except MemoryError:
        logger.error('cannot allocate {} profile entries'.format(nr))
        return None
    return entries


def _populate(ctx, entries, maxtime):
    dc = ctx.dc
    ncyl = len(ctx.dive.cylinders)
    events = [ev for ev in dc.events if ev.time != 0]
    ev_idx = 0
    lastdepth = lasttime = lasttemp = 0

    def insert_entry(time, depth, sac):
        prev = entries[-1]
        entry = prev.copy()
        entry.sec = time
        entry.depth = depth
        entry.running_sum = prev.running_sum \
            + (time - prev.sec) * (depth + prev.depth) // 2
        entry.pressure = [0] * ncyl
        entry.sac = sac
        entry.ndl = -1
        entry.bearing = -1
        entries.append(entry)

    for sample in dc.samples:
        time = sample.time
        depth = sample.depth
        sac = sample.sac

        delta = time - lasttime
        if delta <= 0:
            if entries[-1].sec > 0 or delta < 0:
                logger.warning(
                    'non-increasing sample time {} after {}'.format(time, lasttime)
                )
            time = lasttime
            delta = 1

        for offset in range(const.RASTER, delta, const.RASTER):
            if lasttime + offset > maxtime:
                break

            while ev_idx < len(events) and events[ev_idx].time < lasttime + offset:
                t = events[ev_idx].time
                d = interpolate(lastdepth, depth, t - lasttime, delta)
                insert_entry(t, d, sac)
                ev_idx += 1

            d = interpolate(lastdepth, depth, offset, delta)
            insert_entry(lasttime + offset, d, sac)

            while ev_idx < len(events) and events[ev_idx].time == lasttime + offset:
                ev_idx += 1

        while ev_idx < len(events) and events[ev_idx].time < time:
            t = events[ev_idx].time
            d = interpolate(lastdepth, depth, t - lasttime, delta)
            insert_entry(t, d, sac)
            ev_idx += 1

        prev = entries[-1]
        entry = Entry(ncyl, time, depth)
        entry.running_sum = prev.running_sum \
            + (time - prev.sec) * (depth + prev.depth) // 2
        entry.stopdepth = sample.stopdepth
        entry.stoptime = sample.stoptime
        entry.ndl = sample.ndl
        entry.tts = sample.tts
        entry.in_deco = sample.in_deco
        entry.cns = sample.cns
        if ctx.has_o2sensors:
            entry.o2pressure = entry.o2setpoint = sample.setpoint
            entry.o2sensor = list(sample.o2sensor)
        else:
            entry.pressures = GasPressures(sample.setpoint / 1000, 0.0, 0.0)

        for pressure, sensor in zip(sample.pressure, sample.sensor):
            if pressure and 0 <= sensor < ncyl:
                entry.pressure[sensor] = pressure

        if sample.temperature:
            lasttemp = sample.temperature
        entry.temperature = lasttemp
        entry.heartbeat = sample.heartbeat
        entry.bearing = sample.bearing
        entry.sac = sample.sac
        entry.rbt = sample.rbt
        entries.append(entry)

        while ev_idx < len(events) and events[ev_idx].time == time:
            ev_idx += 1

        lasttime = time
        lastdepth = depth

        if time > maxtime:
            break

    for ev in events[ev_idx:]:
        if ev.time > lasttime:
            insert_entry(ev.time, 0, entries[-1].sac)
            lasttime = ev.time

    for k in range(1, const.PADDING + 1):
        prev = entries[-1]
        entry = Entry(ncyl, lasttime + k, 0)
        entry.running_sum = prev.running_sum + (entry.sec - prev.sec) * prev.depth // 2
        entries.append(entry)


def check_setpoint_events(ctx, entries):
    """
    Assign oxygen setpoints of "SP change" events to profile entries.

    The entries up to time of an event carry the previous setpoint. Non-zero
    setpoint makes the dive a closed circuit rebreather dive for the
    analysis.

    :param ctx: Analysis context.
    :param entries: Profile entries.
    """
    events = [ev for ev in ctx.dc.events if ev.name == 'SP change']
    if not events:
        return

    i = 0
    setpoint = 0
    for ev in events:
        i = _set_setpoint(entries, i, setpoint, ev.time)
        setpoint = ev.value
        if setpoint:
            ctx.divemode = DiveMode.CCR
    _set_setpoint(entries, i, setpoint, None)


def _set_setpoint(entries, i, setpoint, end):
    while i < len(entries):
        entry = entries[i]
        if end is not None and entry.sec > end:
            break
        entry.o2pressure = setpoint
        i += 1
    return i


def event_names(dc):
    """
    Get distinct names of dive computer events in order of appearance.

    :param dc: Dive computer.
    """
    names = []
    for ev in dc.events:
        if ev.name not in names:
            names.append(ev.name)
    return names


# vim: sw=4:et:ai
