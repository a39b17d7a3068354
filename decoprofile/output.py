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
Dense dive profile output.

- summary lines of a profile entry, i.e. to be displayed as a tooltip of
  a dive profile graph
- comparison summary of two profile entries
- dense profile saved in a CSV file

The summaries use display units of analysis preferences.
"""

import csv
from gettext import gettext as _
import logging
from collections import namedtuple

from .analyze import div_trunc
from .config import Units
from .dive import DiveType
from .gas import gasname, gas_volume
from .model import model_class
from . import const

logger = logging.getLogger(__name__)

Comparison = namedtuple(
    'Comparison',
    'delta_time delta_depth min_depth max_depth avg_depth max_desc_speed'
    ' max_asc_speed avg_speed bar_used sac'
)
Comparison.__doc__ = """
Comparison of two profile entries.

:var delta_time: Time between the entries [s].
:var delta_depth: Depth difference [mm].
:var min_depth: Min depth between the entries [mm].
:var max_depth: Max depth between the entries [mm].
:var avg_depth: Average depth [mm].
:var max_desc_speed: Max descent speed [mm/s].
:var max_asc_speed: Max ascent speed [mm/s], negative value.
:var avg_speed: Average vertical speed [mm/s].
:var bar_used: Pressure used from the first cylinder [mbar].
:var sac: SAC rate [ml/min], `None` if cannot be determined.
"""


def div_up(x, y):
    return (x + y - 1) // y


def get_depth_units(mm, units):
    """
    Convert depth to display units.

    Tuple of value, number of decimals and unit name is returned.

    :param mm: Depth [mm].
    :param units: Display units.
    """
    if units.length == Units.FEET:
        return mm * 0.00328084, 0, 'ft'
    return mm / 1000, 1, 'm'


def get_pressure_units(mbar, units):
    """
    Convert pressure to display units.

    Tuple of value and unit name is returned.

    :param mbar: Pressure [mbar].
    :param units: Display units.
    """
    if units.pressure == Units.PSI:
        return round(mbar * 0.0145037738), 'psi'
    return round(mbar / 1000), 'bar'


def get_temp_units(mk, units):
    """
    Convert temperature to display units.

    Tuple of value and unit name is returned.

    :param mk: Temperature [mK].
    :param units: Display units.
    """
    if units.temperature == Units.FAHRENHEIT:
        return mk * 9 / 5000 - 459.67, '°F'
    return (mk - const.ZERO_C_IN_MKELVIN) / 1000, '°C'


def get_volume_units(ml, units):
    """
    Convert volume to display units.

    Tuple of value, number of decimals and unit name is returned.

    :param ml: Volume [ml].
    :param units: Display units.
    """
    if units.volume == Units.CUFT:
        return ml / 28316.8466, 2, 'cuft'
    return ml / 1000, 1, 'ℓ'


def get_vertical_speed_units(mms, units):
    """
    Convert vertical speed to display units.

    Tuple of value, number of decimals and unit name is returned.

    :param mms: Vertical speed [mm/s].
    :param units: Display units.
    """
    per_minute = units.vertical_speed_time == Units.MINUTES
    if units.length == Units.FEET:
        value = mms * 0.00328084
        unit = 'ft/min' if per_minute else 'ft/s'
        decimals = 0
    else:
        value = mms / 1000
        unit = 'm/min' if per_minute else 'm/s'
        decimals = 1
    if per_minute:
        value *= 60
    return value, decimals, unit


def entry_lines(dive, pi, idx, prefs):
    """
    Create summary lines of a profile entry.

    A line is present only if its value is meaningful.

    :param dive: Dive information.
    :param pi: Dense dive profile.
    :param idx: Index of profile entry.
    :param prefs: Analysis preferences.
    """
    units = prefs.units
    entry = pi.entry[idx]
    lines = []

    def depth(mm):
        return get_depth_units(mm, units)

    value, _d, unit = depth(entry.depth)
    lines.append(_('@: {}:{:02d}').format(entry.sec // 60, entry.sec % 60))
    lines.append(_('D: {:.1f}{}').format(value, unit))

    for cyl, cylinder in enumerate(dive.cylinders):
        mbar = entry.get_pressure(cyl)
        if not mbar:
            continue
        value, unit = get_pressure_units(mbar, units)
        lines.append(_('P: {}{} ({})').format(value, unit, gasname(cylinder.gasmix)))

    if entry.temperature:
        value, unit = get_temp_units(entry.temperature, units)
        lines.append(_('T: {:.1f}{}').format(value, unit))

    # ascent is positive
    value, _d, unit = get_vertical_speed_units(abs(entry.speed), units)
    if entry.speed > 0:
        value = -value
    lines.append(_('V: {:.1f}{}').format(value, unit))

    if entry.sac and prefs.show_sac:
        value, decimals, unit = get_volume_units(entry.sac, units)
        lines.append(_('SAC: {:.{}f}{}/min').format(value, decimals, unit))

    if entry.cns:
        lines.append(_('CNS: {}%').format(entry.cns))

    pressures = entry.pressures
    if prefs.pp_po2 and pressures.o2 > 0:
        lines.append(_('pO₂: {:.2f}bar').format(pressures.o2))
        if entry.scr_oc_po2:
            lines.append(_('SCR ΔpO₂: {:.2f}bar').format(
                entry.scr_oc_po2 / 1000 - pressures.o2
            ))
    if prefs.pp_pn2 and pressures.n2 > 0:
        lines.append(_('pN₂: {:.2f}bar').format(pressures.n2))
    if prefs.pp_phe and pressures.he > 0:
        lines.append(_('pHe: {:.2f}bar').format(pressures.he))

    if prefs.mod and entry.mod > 0:
        value, _d, unit = depth(entry.mod)
        lines.append(_('MOD: {}{}').format(round(value), unit))

    if prefs.ead:
        lines.extend(_ead_lines(pi.dive_type, entry, units))

    lines.extend(_stop_lines(entry, prefs))

    if entry.rbt:
        lines.append(_('RBT: {}min').format(div_up(entry.rbt, 60)))

    if prefs.decoinfo:
        if entry.current_gf > 0:
            lines.append(_('GF {}%').format(int(100 * entry.current_gf)))
        if entry.surface_gf > 0:
            lines.append(_('Surface GF {:.0f}%').format(entry.surface_gf))
        if entry.ceiling:
            value, _d, unit = depth(entry.ceiling)
            lines.append(_('Calculated ceiling {:.0f}{}').format(value, unit))
            if prefs.calc_all_tissues:
                data = zip(model_class(prefs).N2_HALF_LIFE, entry.ceilings)
                for half_life, ceiling in data:
                    if not ceiling:
                        continue
                    value, _d, unit = depth(ceiling)
                    lines.append(_('Tissue {:.0f}min: {:.1f}{}').format(
                        half_life, value, unit
                    ))

    if entry.icd_warning:
        lines.append(_('ICD in leading tissue'))
    if entry.heartbeat and prefs.hrgraph:
        lines.append(_('heart rate: {}').format(entry.heartbeat))
    if entry.bearing >= 0:
        lines.append(_('bearing: {}').format(entry.bearing))
    if entry.running_sum and entry.sec:
        value, _d, unit = depth(entry.mean_depth())
        lines.append(_('mean depth to here {:.1f}{}').format(value, unit))

    return lines


def _ead_lines(dive_type, entry, units):
    eadd, _d, unit = get_depth_units(entry.eadd, units)
    eadd = round(eadd)
    density = entry.density
    if dive_type == DiveType.NITROX and entry.ead > 0:
        ead = round(get_depth_units(entry.ead, units)[0])
        return [
            _('EAD: {}{}').format(ead, unit),
            _('EADD: {}{} / {:.1f}g/ℓ').format(eadd, unit, density),
        ]
    if dive_type in (DiveType.NITROX, DiveType.TRIMIX) and entry.end > 0:
        end = round(get_depth_units(entry.end, units)[0])
        return [
            _('END: {}{}').format(end, unit),
            _('EADD: {}{} / {:.1f}g/ℓ').format(eadd, unit, density),
        ]
    if dive_type != DiveType.FREEDIVING and density > 0:
        return [_('Density: {:.1f}g/ℓ').format(density)]
    return []


def _stop_lines(entry, prefs):
    units = prefs.units
    lines = []
    if entry.stopdepth:
        value, _d, unit = get_depth_units(entry.stopdepth, units)
        name = _('Safety stop') if entry.ndl > 0 else _('Deco')
        if entry.stoptime:
            lines.append(_('{}: {}min @ {:.0f}{}').format(
                name, div_up(entry.stoptime, 60), value, unit
            ))
        else:
            lines.append(_('{}: unknown time @ {:.0f}{}').format(name, value, unit))
    elif entry.in_deco:
        lines.append(_('In deco'))
    elif entry.ndl >= 0:
        lines.append(_('NDL: {}min').format(div_up(entry.ndl, 60)))

    if entry.tts:
        lines.append(_('TTS: {}min').format(div_up(entry.tts, 60)))

    if entry.stopdepth_calc and entry.stoptime_calc:
        value, _d, unit = get_depth_units(entry.stopdepth_calc, units)
        lines.append(_('Deco: {}min @ {:.0f}{} (calc)').format(
            div_up(entry.stoptime_calc, 60), value, unit
        ))
    elif entry.in_deco_calc:
        lines.append(_('In deco (calc)'))
    elif prefs.calc_ndl_tts and entry.ndl_calc:
        if entry.ndl_calc < const.MAX_PROFILE_DECO:
            lines.append(_('NDL: {}min (calc)').format(div_up(entry.ndl_calc, 60)))
        else:
            lines.append(_('NDL: >2h (calc)'))

    if entry.tts_calc:
        if entry.tts_calc < const.MAX_PROFILE_DECO:
            lines.append(_('TTS: {}min (calc)').format(div_up(entry.tts_calc, 60)))
        else:
            lines.append(_('TTS: >2h (calc)'))
    return lines


def plot_details(dive, pi, time, prefs):
    """
    Create summary of the profile entry at given time.

    The first entry at or after the time is used, skipping two padding
    entries at both ends of the profile. Tuple of entry index and summary
    text is returned. Index is zero and the text is empty if the profile
    has no entries with data.

    :param dive: Dive information.
    :param pi: Dense dive profile.
    :param time: Dive time [s].
    :param prefs: Analysis preferences.
    """
    nr = len(pi.entry)
    if nr <= 2 * const.PADDING:
        return 0, ''

    idx = const.PADDING
    while idx < nr - 3 and pi.entry[idx].sec < time:
        idx += 1
    return idx, '\n'.join(entry_lines(dive, pi, idx, prefs))


def compare_entries(dive, pi, idx1, idx2, sum_speed=False):
    """
    Compare two profile entries.

    The SAC rate is calculated using the first cylinder if its size is
    known and there is no cylinder change between the entries. `None` is
    returned if the entries have equal time or an index is negative.

    :param dive: Dive information.
    :param pi: Dense dive profile.
    :param idx1: Index of profile entry.
    :param idx2: Index of profile entry.
    :param sum_speed: Use absolute speed for average speed.
    """
    if idx1 < 0 or idx2 < 0:
        return None
    entries = pi.entry
    if entries[idx1].sec > entries[idx2].sec:
        idx1, idx2 = idx2, idx1
    elif entries[idx1].sec == entries[idx2].sec:
        return None

    start = entries[idx1]
    stop = entries[idx2]
    has_cylinder = len(dive.cylinders) > 0

    def pressure(entry):
        return entry.get_pressure(0) if has_cylinder else 0

    avg_speed = max_asc_speed = max_desc_speed = 0
    avg_depth = max_depth = 0
    min_depth = None
    bar_used = 0
    crossed_tankchange = False
    first_pressure = last_pressure = pressure(start)
    last_sec = start.sec

    for data in entries[idx1:idx2 + 1]:
        dt = data.sec - last_sec
        avg_speed += (abs(data.speed) if sum_speed else data.speed) * dt
        avg_depth += data.depth * dt

        max_desc_speed = max(max_desc_speed, data.speed)
        max_asc_speed = min(max_asc_speed, data.speed)
        min_depth = data.depth if min_depth is None else min(min_depth, data.depth)
        max_depth = max(max_depth, data.depth)

        next_pressure = pressure(data)
        if next_pressure and not first_pressure:
            first_pressure = next_pressure
        # pressure increase means a change of cylinder
        if next_pressure and last_pressure:
            if next_pressure < last_pressure + 2000:
                bar_used += last_pressure - next_pressure
            else:
                crossed_tankchange = True
        if next_pressure:
            last_pressure = next_pressure
        last_sec = data.sec

    delta_time = stop.sec - start.sec
    avg_depth //= delta_time
    avg_speed = div_trunc(avg_speed, delta_time)

    sac = None
    cylinder = dive.cylinders[0] if has_cylinder else None
    if bar_used and not crossed_tankchange and cylinder.size:
        volume = gas_volume(cylinder, first_pressure) \
            - gas_volume(cylinder, last_pressure)
        atm = dive.depth_to_atm(avg_depth)
        sac = round(volume / atm * 60 / delta_time)

    return Comparison(
        delta_time, abs(start.depth - stop.depth), min_depth, max_depth,
        avg_depth, max_desc_speed, max_asc_speed, avg_speed, bar_used, sac
    )


def format_comparison(cmp, units):
    """
    Format comparison of two profile entries.

    :param cmp: Comparison of profile entries.
    :param units: Display units.
    """
    def depth(mm):
        value, _d, unit = get_depth_units(mm, units)
        return '{:.1f}{}'.format(value, unit)

    def speed(mms):
        value, _d, unit = get_vertical_speed_units(abs(mms), units)
        return '{:.2f}{}'.format(value, unit)

    line1 = _('ΔT:{}:{:02d}min ΔD:{} ↓D:{} ↑D:{} øD:{}').format(
        cmp.delta_time // 60, cmp.delta_time % 60, depth(cmp.delta_depth),
        depth(cmp.min_depth), depth(cmp.max_depth), depth(cmp.avg_depth)
    )
    line2 = _('↓V:{} ↑V:{} øV:{}').format(
        speed(cmp.max_desc_speed), speed(cmp.max_asc_speed),
        speed(cmp.avg_speed)
    )
    if cmp.bar_used:
        value, unit = get_pressure_units(cmp.bar_used, units)
        line2 += _(' ΔP:{}{}').format(value, unit)
        if cmp.sac is not None:
            value, decimals, unit = get_volume_units(cmp.sac, units)
            line2 += _(' SAC:{:.{}f}{}/min').format(value, decimals, unit)
    return line1 + '\n' + line2


def write_csv(f, pi):
    """
    Write dense dive profile into a CSV file.

    :param f: File object.
    :param pi: Dense dive profile.
    """
    ncyl = len(pi.entry[0].pressure) if pi.entry else 0
    header = [
        'time', 'depth', 'smoothed', 'speed', 'velocity', 'temperature',
        'po2', 'pn2', 'phe', 'sac', 'ceiling', 'ndl', 'tts', 'stopdepth',
        'stoptime', 'ndl_calc', 'tts_calc', 'stopdepth_calc',
        'stoptime_calc', 'surface_gf',
    ] + ['pressure_{}'.format(i) for i in range(ncyl)]

    fcsv = csv.writer(f)
    fcsv.writerow(header)
    for entry in pi.entry:
        p = entry.pressures
        row = [
            entry.sec, entry.depth, entry.smoothed, entry.speed,
            entry.velocity, entry.temperature, p.o2, p.n2, p.he, entry.sac,
            entry.ceiling, entry.ndl, entry.tts, entry.stopdepth,
            entry.stoptime, entry.ndl_calc, entry.tts_calc,
            entry.stopdepth_calc, entry.stoptime_calc, entry.surface_gf,
        ]
        row.extend(entry.get_pressure(i) for i in range(ncyl))
        fcsv.writerow(row)


# vim: sw=4:et:ai
