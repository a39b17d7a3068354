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
Basic Usage
-----------

The DecoProfile dive profile analysis library exports its main API via
``decoprofile`` module.

A dive is described by its cylinders and dive computers. Each dive
computer provides samples and events recorded during the dive. The
following example describes a dive to 18 meters for 40 minutes on air::

    >>> from decoprofile.dive import Dive, DiveComputer, Sample, Cylinder
    >>> from decoprofile.gas import GASMIX_AIR
    >>> samples = [
    ...     Sample(0, 0), Sample(120, 18000), Sample(2400, 18000),
    ...     Sample(2580, 0),
    ... ]
    >>> dive = Dive(
    ...     cylinders=[Cylinder(GASMIX_AIR, 200000, 100000, 12000, 232000)],
    ...     dcs=[DiveComputer(samples)],
    ... )

The dense dive profile is created with :func:`~decoprofile.create`
function, which creates decompression engine for analysis preferences,
and :func:`~decoprofile.create_plot_info` function::

    >>> import decoprofile
    >>> engine = decoprofile.create()
    >>> pi = decoprofile.create_plot_info(dive, dive.dcs[0], engine.prefs, engine=engine)
    >>> pi.entry[2].sec, pi.entry[-3].sec
    (0, 2580)
    >>> pi.maxdepth
    18000

The dense dive profile contains two padding entries at both ends. The
mean depth of the dive is calculated as well::

    >>> pi.entry[-1].sec
    2582
    >>> pi.meandepth
    16953

The profile entries are summarized with functions of
:py:mod:`decoprofile.output` module.
"""

import logging

from .config import Preferences, DecoMode
from .dive import get_dive_type
from .engine import DecoEngine
from .model import ZH_L16B_GF, ZH_L16C_GF, VPMB
from .profile import PlotInfo, AnalysisContext, populate_plot_entries, \
    check_setpoint_events, event_names
from .limits import calculate_max_limits
from .gaspressure import setup_gas_sensor_pressure, fill_interpolated_pressures
from .physiology import fill_o2_values, calculate_gas_information
from .sac import calculate_sac
from .analyze import analyze_plot_info, analyze_minmax
from . import const

__version__ = '0.1.0'

logger = logging.getLogger(__name__)


def create(prefs=None):
    """
    Create decompression engine.

    Default analysis preferences are used if not specified.

    Usage

    >>> import decoprofile
    >>> engine = decoprofile.create()
    >>> engine.model      # doctest:+ELLIPSIS
    <decoprofile.model.ZH_L16C_GF object at ...>
    >>> engine.model.gf_low, engine.model.gf_high
    (0.3, 0.75)

    :param prefs: Analysis preferences.
    """
    if prefs is None:
        prefs = Preferences()
    return DecoEngine(prefs)


def create_plot_info(dive, dc, prefs, fast=False, engine=None):
    """
    Create dense dive profile of a dive computer.

    `None` is returned if the profile entries cannot be allocated.

    :param dive: Dive information.
    :param dc: Analysed dive computer.
    :param prefs: Analysis preferences.
    :param fast: Skip expensive analysis steps.
    :param engine: Decompression engine, created for the preferences by
        default.
    """
    if engine is None:
        engine = DecoEngine(prefs)

    limits = calculate_max_limits(dive, dc)
    ctx = AnalysisContext(dive, dc, prefs, fast)
    pi = PlotInfo(limits, get_dive_type(dive, ctx.divemode))

    entries = populate_plot_entries(ctx, limits.maxtime)
    if entries is None:
        return None
    pi.entry = entries

    check_setpoint_events(ctx, entries)
    setup_gas_sensor_pressure(ctx, entries)
    if not fast:
        fill_interpolated_pressures(entries, len(dive.cylinders))
    fill_o2_values(ctx, entries)
    pi.maxpp = calculate_gas_information(ctx, entries)
    calculate_sac(ctx, entries)
    pi.iterations = engine.calculate(ctx, entries)

    analyze_plot_info(entries)
    analyze_minmax(entries)

    pi.event_names = event_names(dc)
    # the last entries are padding
    last = entries[-const.PADDING - 1]
    pi.meandepth = last.mean_depth()

    if __debug__:
        logger.debug('profile of {} entries created, {} iterations'.format(
            len(entries), pi.iterations
        ))
    return pi


__all__ = [
    'create', 'create_plot_info', 'DecoEngine', 'Preferences', 'DecoMode',
    'ZH_L16B_GF', 'ZH_L16C_GF', 'VPMB',
]

# vim: sw=4:et:ai
