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
Dive log data consumed by the profile analysis.

The dive log is read by a collaborator (i.e. an import module of a dive
log application) and passed to the library as :class:`Dive` object. Each
dive has one or more dive computers, each dive computer records samples
and events. Samples, events and cylinders are immutable.

Example of a dive at 18m for 40 minutes on air::

    >>> from decoprofile.dive import Dive, DiveComputer, Sample, Cylinder
    >>> from decoprofile.gas import GasMix
    >>> samples = [Sample(0, 0), Sample(60, 18000), Sample(2460, 18000),
    ...     Sample(2640, 0)]
    >>> dc = DiveComputer(samples)
    >>> dive = Dive([Cylinder(GasMix(0, 0), 200000, 100000, 12000)], [dc])
    >>> dive.depth_to_mbar(18000)
    2832
    >>> dive.mbar_to_depth(2832)
    18000
"""

from collections import namedtuple
import logging

from .gas import GasMix, DiveMode, GASMIX_AIR, get_he, same_gasmix, \
    gasmix_is_air
from . import const

logger = logging.getLogger(__name__)

Sample = namedtuple(
    'Sample',
    'time depth pressure sensor temperature heartbeat bearing stoptime'
    ' stopdepth ndl tts in_deco cns setpoint o2sensor sac rbt'
)
Sample.__new__.__defaults__ = (
    (0, 0), (0, 1), 0, 0, -1, 0, 0, -1, 0, False, 0, 0, (0, 0, 0), 0, 0
)
Sample.__doc__ = """
Dive sample recorded by a dive computer.

:var time: Dive time [s].
:var depth: Depth [mm].
:var pressure: Two cylinder pressure readings [mbar], zero if not recorded.
:var sensor: Cylinder indexes of the pressure readings.
:var temperature: Water temperature [mK], zero if not recorded.
:var heartbeat: Heart rate [bpm].
:var bearing: Compass bearing [deg], -1 if not recorded.
:var stoptime: Time of decompression stop [s] as calculated by dive computer.
:var stopdepth: Depth of decompression stop [mm].
:var ndl: No decompression limit [s], -1 if unknown.
:var tts: Time to surface [s].
:var in_deco: True if diver has decompression obligation.
:var cns: CNS oxygen toxicity [%].
:var setpoint: Rebreather oxygen setpoint [mbar].
:var o2sensor: Oxygen sensors readings [mbar].
:var sac: SAC rate recorded by dive computer [ml/min].
:var rbt: Remaining bottom time [s].
"""

Event = namedtuple('Event', 'name time value cylinder')
Event.__new__.__defaults__ = (0, -1)
Event.__doc__ = """
Dive event recorded by a dive computer.

:var name: Event name, i.e. `gaschange`, `SP change`, `modechange`.
:var time: Dive time [s].
:var value: Event value.
:var cylinder: Cylinder index, -1 if event does not refer a cylinder.
"""

Cylinder = namedtuple('Cylinder', 'gasmix start end size workingpressure')
Cylinder.__new__.__defaults__ = (0, 0, 0, 0)
Cylinder.__doc__ = """
Dive cylinder information.

:var gasmix: Gas mix.
:var start: Start pressure [mbar].
:var end: End pressure [mbar].
:var size: Cylinder water volume [ml].
:var workingpressure: Cylinder working pressure [mbar].
"""


class DiveType(object):
    """
    Dive type enumeration.
    """
    AIR = 'air'
    NITROX = 'nitrox'
    TRIMIX = 'trimix'
    FREEDIVING = 'freediving'



class DiveComputer(object):
    """
    Dive computer recording of a dive.

    :var model: Dive computer model name.
    :var samples: List of samples ordered by time.
    :var events: List of events ordered by time.
    :var divemode: Dive mode.
    :var no_o2sensors: Number of oxygen sensors of a rebreather.
    :var surface_pressure: Surface pressure [mbar], zero if unknown.
    :var salinity: Water salinity [g/10l], zero if unknown.
    """
    def __init__(self, samples=None, events=None, divemode=DiveMode.OC,
            model='', no_o2sensors=0, surface_pressure=0, salinity=0):
        self.model = model
        self.samples = list(samples) if samples else []
        self.events = list(events) if events else []
        self.divemode = divemode
        self.no_o2sensors = no_o2sensors
        self.surface_pressure = surface_pressure
        self.salinity = salinity



class Dive(object):
    """
    Dive information.

    :var cylinders: List of cylinders.
    :var dcs: List of dive computers.
    :var maxdepth: Maximum depth recorded in dive log [mm].
    :var mintemp: Minimum temperature recorded in dive log [mK].
    :var maxtemp: Maximum temperature recorded in dive log [mK].
    :var surface_pressure: Surface pressure [mbar], zero if unknown.
    :var salinity: Water salinity [g/10l], zero if unknown.
    """
    def __init__(self, cylinders=None, dcs=None, maxdepth=0, mintemp=0,
            maxtemp=0, surface_pressure=0, salinity=0):
        self.cylinders = list(cylinders) if cylinders else []
        self.dcs = list(dcs) if dcs else [DiveComputer()]
        self.maxdepth = maxdepth
        self.mintemp = mintemp
        self.maxtemp = maxtemp
        self.surface_pressure = surface_pressure
        self.salinity = salinity

        if len(self.cylinders) > const.MAX_CYLINDERS:
            raise ValueError('Too many cylinders: {}'.format(len(self.cylinders)))


    def get_surface_pressure(self):
        """
        Get surface pressure of the dive [mbar].
        """
        mbar = self.surface_pressure
        if not mbar:
            mbar = next(
                (dc.surface_pressure for dc in self.dcs if dc.surface_pressure),
                const.SURFACE_PRESSURE
            )
        return mbar


    def get_salinity(self):
        """
        Get water salinity of the dive [g/10l].
        """
        salinity = self.salinity
        if not salinity:
            salinity = next(
                (dc.salinity for dc in self.dcs if dc.salinity),
                const.SEAWATER_SALINITY
            )
        if salinity < 500:
            salinity += const.FRESHWATER_SALINITY
        return salinity


    def depth_to_mbar(self, depth):
        """
        Convert depth to absolute pressure [mbar].

        :param depth: Depth [mm].
        """
        specific_weight = self.get_salinity() * 0.981 / 100000.0
        return round(depth * specific_weight) + self.get_surface_pressure()


    def depth_to_bar(self, depth):
        """
        Convert depth to absolute pressure [bar].

        :param depth: Depth [mm].
        """
        return self.depth_to_mbar(depth) / 1000.0


    def depth_to_atm(self, depth):
        """
        Convert depth to absolute pressure [atm].

        :param depth: Depth [mm].
        """
        return self.depth_to_mbar(depth) / const.ATM


    def rel_mbar_to_depth(self, mbar):
        """
        Convert pressure relative to the surface into depth [mm].

        The depth is rounded to centimetres.

        :param mbar: Relative pressure [mbar].
        """
        specific_weight = self.get_salinity() / 10000.0 * 0.981
        cm = round(mbar / specific_weight)
        return cm * 10


    def mbar_to_depth(self, mbar):
        """
        Convert absolute pressure into depth [mm].

        :param mbar: Absolute pressure [mbar].
        """
        return self.rel_mbar_to_depth(mbar - self.get_surface_pressure())


    def get_cylinder(self, idx):
        """
        Get cylinder with index `idx` or `None` if it does not exist.

        :param idx: Cylinder index.
        """
        if 0 <= idx < len(self.cylinders):
            return self.cylinders[idx]
        return None


    def get_gasmix(self, idx):
        """
        Get gas mix of a cylinder, air if the cylinder does not exist.

        :param idx: Cylinder index.
        """
        cyl = self.get_cylinder(idx)
        return cyl.gasmix if cyl else GASMIX_AIR



def gasmix_from_event(dive, ev):
    """
    Get gas mix of a gas change event.

    If the event refers a cylinder, then gas mix of the cylinder is
    returned. Otherwise the gas mix is decoded from event value, which is
    O2 percentage in lower 16 bits and helium percentage in upper 16 bits.

    :param dive: Dive information.
    :param ev: Gas change event.
    """
    if 0 <= ev.cylinder < len(dive.cylinders):
        return dive.cylinders[ev.cylinder].gasmix
    o2 = (ev.value & 0xffff) * 10
    he = ((ev.value >> 16) & 0xffff) * 10
    return GasMix(o2, he)


def get_cylinder_index(dive, ev):
    """
    Get index of a cylinder used by gas change event.

    If the event does not refer a cylinder, then the first cylinder with
    the event gas mix is used. Cylinder 0 is used if no cylinder matches.

    :param dive: Dive information.
    :param ev: Gas change event.
    """
    if 0 <= ev.cylinder < len(dive.cylinders):
        return ev.cylinder

    mix = gasmix_from_event(dive, ev)
    for i, cyl in enumerate(dive.cylinders):
        if same_gasmix(cyl.gasmix, mix):
            return i

    logger.warning('no cylinder matches gas change event {}'.format(ev))
    return 0


def gasmix_events(dc):
    return (ev for ev in dc.events if ev.name == 'gaschange')


def explicit_first_cylinder(dive, dc):
    """
    Get index of the first cylinder used by a dive computer.

    Gas change event at time of the first sample (or within first second
    of a dive) names the first cylinder, otherwise it is cylinder 0.

    :param dive: Dive information.
    :param dc: Dive computer.
    """
    first_time = dc.samples[0].time if dc.samples else 0
    ev = next(gasmix_events(dc), None)
    if ev is not None and (ev.time == first_time or ev.time <= 1):
        return get_cylinder_index(dive, ev)
    return 0


def get_dive_type(dive, divemode):
    """
    Determine dive type using gas mixes of the cylinders.

    :param dive: Dive information.
    :param divemode: Dive mode.
    """
    if divemode == DiveMode.FREEDIVE:
        return DiveType.FREEDIVING
    mixes = [cyl.gasmix for cyl in dive.cylinders]
    if any(get_he(mix) > 0 for mix in mixes):
        return DiveType.TRIMIX
    if any(not gasmix_is_air(mix) for mix in mixes):
        return DiveType.NITROX
    return DiveType.AIR



class GasmixLoop(object):
    """
    Forward only cursor over gas changes of a dive computer.

    The cursor is created per pipeline step, query times must not
    decrease. Gas change takes effect at the time of its event.

    :var dive: Dive information.
    :var dc: Dive computer.
    """
    def __init__(self, dive, dc):
        self.dive = dive
        self.events = list(gasmix_events(dc))
        self.cylinder = explicit_first_cylinder(dive, dc)
        self.gasmix = dive.get_gasmix(self.cylinder)
        self._idx = 0


    def next(self, time):
        """
        Get gas mix in use at given time.

        :param time: Dive time [s].
        """
        events = self.events
        while self._idx < len(events) and events[self._idx].time <= time:
            ev = events[self._idx]
            self.cylinder = get_cylinder_index(self.dive, ev)
            self.gasmix = gasmix_from_event(self.dive, ev)
            self._idx += 1
        return self.gasmix



class DivemodeLoop(object):
    """
    Forward only cursor over dive mode changes of a dive computer.

    Value of `modechange` event is index of dive mode in
    :py:attr:`decoprofile.gas.DiveMode.ALL`.

    :var divemode: Current dive mode.
    """
    def __init__(self, dc, divemode=None):
        self.events = [ev for ev in dc.events if ev.name == 'modechange']
        self.divemode = dc.divemode if divemode is None else divemode
        self._idx = 0


    def next(self, time):
        """
        Get dive mode at given time.

        :param time: Dive time [s].
        """
        events = self.events
        while self._idx < len(events) and events[self._idx].time <= time:
            value = events[self._idx].value
            if 0 <= value < len(DiveMode.ALL):
                self.divemode = DiveMode.ALL[value]
            else:
                logger.warning('invalid dive mode change value {}'.format(value))
            self._idx += 1
        return self.divemode


# vim: sw=4:et:ai
