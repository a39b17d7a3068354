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
Decompression engine.

The engine walks dense dive profile and loads tissue compartments of
decompression model with inert gas. For each profile entry it calculates

- ascent ceiling
- ceiling and saturation percentage of each tissue compartment
- surface gradient factor
- no decompression limit (NDL), decompression stop and time to surface
  (TTS) using nested simulation of an ascent

The VPM-B allowed supersaturation gradients depend on total decompression
time, which is not known before the walk. Therefore, for VPM-B model, the
walk is repeated until the decompression time estimate changes by less
than 30 seconds or 10 iterations are performed. The Buhlmann model walks
the profile once.

The decompression model is shared with other users of the library (i.e.
dive planner), so the engine holds the planner lock during calculations.
"""

import logging

from .config import DecoMode
from .lock import PLANNER_LOCK
from .model import create_model
from .profile import interpolate, round_up
from . import const

logger = logging.getLogger(__name__)


class DecoEngine(object):
    """
    Decompression engine.

    :var prefs: Analysis preferences.
    :var model: Decompression model.
    :var lock: Lock of the shared decompression model.
    """
    def __init__(self, prefs, model=None, lock=PLANNER_LOCK):
        """
        Create decompression engine.

        :py:exc:`decoprofile.error.ConfigError` is raised if analysis
        preferences are invalid.

        :param prefs: Analysis preferences.
        :param model: Decompression model, created using the preferences
            by default.
        :param lock: Lock of the shared decompression model.
        """
        super().__init__()
        prefs.validate()
        self.prefs = prefs
        self.model = create_model(prefs) if model is None else model
        self.lock = lock


    @property
    def vpmb(self):
        return self.model.DECO_MODE == DecoMode.VPMB


    def ascent_velocity(self, depth, avg_depth):
        """
        Calculate ascent velocity at given depth [mm/s].

        :param depth: Current depth [mm].
        :param avg_depth: Average depth of a dive [mm].
        """
        prefs = self.prefs
        if depth * 4 > avg_depth * 3:
            return prefs.ascrate75
        elif depth * 2 > avg_depth:
            return prefs.ascrate50
        elif depth > 6000:
            return prefs.ascratestops
        else:
            return prefs.ascratelast6m


    def deco_allowed_depth(self, tolerance, surface_pressure, dive, smooth):
        """
        Convert tolerated ambient pressure into ceiling depth [mm].

        :param tolerance: Tolerated ambient pressure [bar].
        :param surface_pressure: Surface pressure [bar].
        :param dive: Dive information.
        :param smooth: If false, round the depth up to 3m.
        """
        delta = max(tolerance - surface_pressure, 0.0)
        depth = dive.rel_mbar_to_depth(round(delta * 1000))
        if not smooth:
            depth = round_up(depth, const.DECO_STOP_STEP)
        return depth


    def calculate(self, ctx, entries):
        """
        Calculate decompression information of dense profile entries.

        Number of performed iterations is returned.

        :param ctx: Analysis context.
        :param entries: Profile entries.
        """
        with self.lock:
            return self._calculate(ctx, entries)


    def _calculate(self, ctx, entries):
        dive = ctx.dive
        prefs = self.prefs
        model = self.model
        vpmb = self.vpmb
        surface = dive.get_surface_pressure() / 1000
        maxtime = entries[-1].sec
        last_idx = len(entries) - 1

        state = model.init(surface)
        initial = state.snapshot()

        prev_deco_time = 10000000
        time_deep_ceiling = 0
        first_iteration = True
        count = 0

        while abs(prev_deco_time - state.deco_time) >= const.DECO_TIME_TOLERANCE \
                and count < const.MAX_ITERATIONS:
            last_ndl_tts_calc_time = 0
            first_ceiling = 0
            last_ceiling = 0
            final_tts = 0
            time_clear_ceiling = 0
            if vpmb:
                state.first_ceiling_pressure = dive.depth_to_mbar(first_ceiling)

            gasmixes = ctx.gasmix_loop()
            divemodes = ctx.divemode_loop()

            for i in range(1, len(entries)):
                prev = entries[i - 1]
                entry = entries[i]
                t0 = prev.sec
                t1 = entry.sec
                step = const.DECO_TIME_STEP

                divemode = divemodes.next(t1)
                gasmix = gasmixes.next(t1)
                entry.ambpressure = dive.depth_to_bar(entry.depth)
                entry.gfline = model.gf(state, entry.ambpressure, surface) \
                    * (100.0 - const.AMB_PERCENTAGE) + const.AMB_PERCENTAGE

                if t0 > t1:
                    logger.warning('non-monotonic entry times {} {}'.format(t0, t1))
                    t0, t1 = t1, t0
                if t0 != t1 and t1 - t0 < step:
                    step = t1 - t0

                j = t0 + step
                while j <= t1:
                    depth = interpolate(prev.depth, entry.depth, j - t0, t1 - t0)
                    model.load(
                        state, dive.depth_to_bar(depth), gasmix, step,
                        entry.o2pressure, divemode, prefs
                    )
                    entry.icd_warning = state.icd_warning
                    if t1 - j < step and j < t1:
                        step = t1 - j
                    j += step

                if t0 == t1:
                    entry.ceiling = prev.ceiling
                else:
                    if vpmb and first_iteration and last_ceiling >= first_ceiling:
                        model.nuclear_regeneration(state, t1)
                        model.start_gradient(state)

                    tolerance = model.tolerance(state, entry.ambpressure, surface)
                    entry.ceiling = self.deco_allowed_depth(
                        tolerance, surface, dive, not prefs.calc_ceiling_3m
                    )
                    if prefs.calc_ceiling_3m:
                        current_ceiling = self.deco_allowed_depth(
                            tolerance, surface, dive, True
                        )
                    else:
                        current_ceiling = entry.ceiling
                    last_ceiling = current_ceiling

                    if vpmb:
                        if current_ceiling >= first_ceiling or \
                                (time_deep_ceiling == t0 and entry.depth == prev.depth):
                            time_deep_ceiling = t1
                            first_ceiling = current_ceiling
                            state.first_ceiling_pressure = dive.depth_to_mbar(first_ceiling)
                            if first_iteration:
                                model.nuclear_regeneration(state, t1)
                                model.start_gradient(state)
                                state.deco_time = maxtime - t1 + 1800
                                model.next_gradient(state, state.deco_time, surface)

                        if current_ceiling > 0:
                            time_clear_ceiling = 0
                        elif time_clear_ceiling == 0 and t1 > time_deep_ceiling:
                            time_clear_ceiling = t1

                self._tissues(state, entry, surface, dive)

                last = i == last_idx
                calc = (prefs.calc_ndl_tts and (not vpmb or not first_iteration)) \
                    or (vpmb and last)
                if not calc:
                    continue

                if entry.sec - last_ndl_tts_calc_time < const.NDL_TTS_INTERVAL \
                        and not last:
                    entry.stoptime_calc = prev.stoptime_calc
                    entry.stopdepth_calc = prev.stopdepth_calc
                    entry.tts_calc = prev.tts_calc
                    entry.ndl_calc = prev.ndl_calc
                    entry.in_deco_calc = prev.in_deco_calc
                    continue
                last_ndl_tts_calc_time = entry.sec

                cache = state.snapshot()
                self.calculate_ndl_tts(state, ctx, entry, gasmix, surface, divemode)
                if vpmb and last:
                    final_tts = entry.tts_calc
                state.restore(cache)

            if vpmb:
                prev_deco_time = state.deco_time
                deco_time = self._next_deco_time(
                    state.deco_time, final_tts, last_ndl_tts_calc_time,
                    time_deep_ceiling, time_clear_ceiling
                )
                model.next_gradient(state, deco_time, surface)
                first_iteration = False
                count += 1
                state.restore(initial, keep_vpmb=True)
                state.deco_time = deco_time
                if __debug__:
                    logger.debug('vpm-b iteration {}: deco time {}s -> {}s'.format(
                        count, prev_deco_time, deco_time
                    ))
            else:
                prev_deco_time = state.deco_time = 0
                count += 1

        if vpmb and abs(prev_deco_time - state.deco_time) >= const.DECO_TIME_TOLERANCE:
            logger.info(
                'vpm-b deco time did not converge after {} iterations,'
                ' accepting {}s'.format(count, state.deco_time)
            )
        return count


    def _next_deco_time(self, deco_time, final_tts, last_calc_time,
            time_deep_ceiling, time_clear_ceiling):
        """
        Estimate total decompression time using time to surface at the end
        of a dive or time of ceiling clearance.
        """
        if final_tts > 0:
            return last_calc_time + final_tts - time_deep_ceiling
        elif time_clear_ceiling > 0:
            return round_up(time_clear_ceiling - time_deep_ceiling + 20, 60) + 20
        return deco_time


    def _tissues(self, state, entry, surface, dive):
        """
        Calculate ceiling, saturation percentage and gradient factors of
        each tissue compartment.
        """
        amb = entry.ambpressure
        entry.surface_gf = 0.0
        entry.current_gf = 0.0
        data = zip(
            state.buehlmann_inertgas_a, state.buehlmann_inertgas_b,
            state.tissue_inertgas_saturation, state.tolerated_by_tissue
        )
        for j, (a, b, sat, tolerated) in enumerate(data):
            m_value = a + amb / b
            surface_m_value = a + surface / b
            entry.ceilings[j] = self.deco_allowed_depth(tolerated, surface, dive, True)

            current_gf = (sat - amb) / (m_value - amb)
            if sat < amb:
                entry.percentages[j] = round(sat / amb * const.AMB_PERCENTAGE)
            else:
                entry.percentages[j] = round(
                    const.AMB_PERCENTAGE + current_gf * (100.0 - const.AMB_PERCENTAGE)
                )
            entry.current_gf = max(entry.current_gf, current_gf)

            surface_gf = 100.0 * (sat - surface) / (surface_m_value - surface)
            entry.surface_gf = max(entry.surface_gf, surface_gf)


    def calculate_ndl_tts(self, state, ctx, entry, gasmix, surface, divemode):
        """
        Calculate no decompression limit, decompression stop and time to
        surface of a profile entry.

        The decompression model state is advanced by the simulation, take
        its snapshot before calling the method.

        If there is no ceiling, then diver stays at current depth until the
        ceiling appears (NDL). Otherwise, diver ascends to decompression
        stops every 3m and stays at a stop until the next stop is allowed
        (TTS). Both are capped at 2 hours. No decompression limit is not
        calculated shallower than 3m.

        :param state: Decompression model state.
        :param ctx: Analysis context.
        :param entry: Profile entry.
        :param gasmix: Gas mix in use.
        :param surface: Surface pressure [bar].
        :param divemode: Dive mode.
        """
        dive = ctx.dive
        model = self.model
        prefs = self.prefs
        step = 60
        deco_step = const.DECO_STOP_STEP
        avg_depth = entry.mean_depth()

        def load(depth, time):
            model.load(
                state, dive.depth_to_bar(depth), gasmix, time,
                entry.o2pressure, divemode, prefs
            )

        def ceiling(depth):
            tolerance = model.tolerance(state, dive.depth_to_bar(depth), surface)
            return self.deco_allowed_depth(tolerance, surface, dive, True)

        entry.ndl_calc = 0
        entry.tts_calc = 0
        entry.stoptime_calc = 0
        entry.stopdepth_calc = 0
        entry.in_deco_calc = False

        next_stop = round_up(ceiling(entry.depth), deco_step)
        if next_stop == 0:
            if entry.depth < 3000:
                entry.ndl_calc = const.MAX_PROFILE_DECO
                return
            while entry.ndl_calc < const.MAX_PROFILE_DECO and ceiling(entry.depth) <= 0:
                entry.ndl_calc += step
                load(entry.depth, step)
            return

        entry.in_deco_calc = True

        ascent_depth = entry.depth
        while ascent_depth > next_stop:
            load(ascent_depth, 1)
            next_stop = round_up(ceiling(ascent_depth), deco_step)
            ascent_depth -= self.ascent_velocity(ascent_depth, avg_depth)
            entry.tts_calc += 1
        ascent_depth = next_stop

        entry.stopdepth_calc = next_stop
        next_stop -= deco_step

        while next_stop >= 0:
            if ascent_depth == entry.stopdepth_calc:
                entry.stoptime_calc += step

            entry.tts_calc += step
            if entry.tts_calc > const.MAX_PROFILE_DECO:
                break
            load(ascent_depth, step)

            if ceiling(ascent_depth) <= next_stop:
                while ascent_depth > next_stop:
                    load(ascent_depth, 1)
                    ascent_depth -= self.ascent_velocity(ascent_depth, avg_depth)
                    entry.tts_calc += 1
                ascent_depth = next_stop
                next_stop -= deco_step

        if __debug__:
            logger.debug('entry {}s: stop {}mm for {}s, tts {}s'.format(
                entry.sec, entry.stopdepth_calc, entry.stoptime_calc, entry.tts_calc
            ))


# vim: sw=4:et:ai
