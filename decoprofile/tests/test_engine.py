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
Decompression engine tests.
"""

from decoprofile.config import Preferences, DecoMode
from decoprofile.dive import Dive
from decoprofile.engine import DecoEngine
from decoprofile.error import ConfigError
from decoprofile.gas import DiveMode
from decoprofile.physiology import fill_o2_values, calculate_gas_information
from decoprofile.profile import Entry, populate_plot_entries

from .tools import AIR, _ctx, _dive, _flat_dive

import itertools
import unittest
from unittest import mock


def _prepare(dive, prefs):
    ctx = _ctx(dive, prefs)
    entries = populate_plot_entries(ctx, dive.dcs[0].samples[-1].time)
    fill_o2_values(ctx, entries)
    calculate_gas_information(ctx, entries)
    return ctx, entries


class EngineTestCase(unittest.TestCase):
    """
    Decompression engine tests.
    """
    def setUp(self):
        self.prefs = Preferences()
        self.engine = DecoEngine(self.prefs, lock=mock.MagicMock())


    def test_invalid_prefs(self):
        """
        Test decompression engine with invalid preferences
        """
        self.prefs.gf_low = 90
        self.prefs.gf_high = 80
        self.assertRaises(ConfigError, DecoEngine, self.prefs)


    def test_ascent_velocity(self):
        """
        Test ascent velocity depending on depth
        """
        self.prefs.ascrate75 = 150
        self.prefs.ascrate50 = 100
        self.prefs.ascratestops = 80
        self.prefs.ascratelast6m = 17
        self.assertEqual(150, self.engine.ascent_velocity(18000, 20000))
        self.assertEqual(100, self.engine.ascent_velocity(12000, 20000))
        self.assertEqual(80, self.engine.ascent_velocity(8000, 20000))
        self.assertEqual(17, self.engine.ascent_velocity(5000, 20000))


    def test_deco_allowed_depth(self):
        """
        Test conversion of tolerated pressure to ceiling depth
        """
        dive = Dive()
        v = self.engine.deco_allowed_depth(1.3132, 1.0132, dive, True)
        self.assertEqual(2970, v)
        v = self.engine.deco_allowed_depth(1.3132, 1.0132, dive, False)
        self.assertEqual(3000, v)
        v = self.engine.deco_allowed_depth(0.9, 1.0132, dive, False)
        self.assertEqual(0, v)


    def test_lock(self):
        """
        Test decompression engine holds the lock during calculation
        """
        ctx, entries = _prepare(_dive(10000, 600), self.prefs)
        self.engine.calculate(ctx, entries)
        self.engine.lock.__enter__.assert_called_once_with()
        self.engine.lock.__exit__.assert_called_once_with(None, None, None)



class BuehlmannTestCase(unittest.TestCase):
    """
    Decompression engine with Buhlmann decompression model tests.
    """
    def setUp(self):
        self.prefs = Preferences()
        self.engine = DecoEngine(self.prefs)


    def test_shallow_dive(self):
        """
        Test no ceiling for shallow dive
        """
        ctx, entries = _prepare(_dive(10000, 1200), self.prefs)
        count = self.engine.calculate(ctx, entries)
        self.assertEqual(1, count)
        self.assertTrue(all(e.ceiling == 0 for e in entries))
        self.assertTrue(all(e.surface_gf >= 0 for e in entries))


    def test_deep_dive(self):
        """
        Test ceiling of decompression dive
        """
        ctx, entries = _prepare(_dive(40000, 1800), self.prefs)
        self.engine.calculate(ctx, entries)
        self.assertTrue(all(e.ceiling >= 0 for e in entries))
        self.assertTrue(max(e.ceiling for e in entries) > 0)
        self.assertEqual(0, entries[3].ceiling)
        self.assertTrue(max(e.surface_gf for e in entries) > 100)


    def test_ceiling_3m(self):
        """
        Test ceiling rounded to 3m
        """
        self.prefs.calc_ceiling_3m = True
        ctx, entries = _prepare(_dive(40000, 1800), self.prefs)
        self.engine.calculate(ctx, entries)
        self.assertTrue(all(e.ceiling % 3000 == 0 for e in entries))


    def test_ndl(self):
        """
        Test no decompression limit shrinking during a dive at 18m
        """
        self.prefs.calc_ndl_tts = True
        ctx, entries = _prepare(_flat_dive(), self.prefs)
        self.engine.calculate(ctx, entries)

        early = next(e for e in entries if e.sec == 300)
        late = next(e for e in entries if e.sec == 900)
        self.assertTrue(0 < late.ndl_calc < early.ndl_calc)
        self.assertFalse(early.in_deco_calc)


    def test_ndl_surface(self):
        """
        Test no decompression limit is not calculated at the surface
        """
        self.prefs.calc_ndl_tts = True
        ctx, entries = _prepare(_dive(10000, 1200), self.prefs)
        self.engine.calculate(ctx, entries)
        self.assertEqual(7200, entries[-1].ndl_calc)
        self.assertFalse(entries[-1].in_deco_calc)


    def test_tts(self):
        """
        Test decompression stop and time to surface
        """
        self.prefs.calc_ndl_tts = True
        ctx, entries = _prepare(_dive(40000, 1800), self.prefs)
        self.engine.calculate(ctx, entries)

        deco = [e for e in entries if e.in_deco_calc]
        self.assertTrue(deco)
        e = deco[-1]
        self.assertTrue(e.tts_calc > 0)
        self.assertEqual(0, e.ndl_calc)
        self.assertEqual(0, e.stopdepth_calc % 3000)


    def test_ndl_tts_snapshot(self):
        """
        Test NDL calculation is repeatable from a state snapshot
        """
        dive = _flat_dive()
        ctx = _ctx(dive, self.prefs)
        model = self.engine.model
        state = model.init(1.013)
        model.load(state, 2.832, AIR, 600, 0, DiveMode.OC, self.prefs)
        model.tolerance(state, 2.832, 1.013)
        snapshot = state.snapshot()

        entry = Entry(1, 660, 18000)
        entry.running_sum = 660 * 15000
        self.engine.calculate_ndl_tts(state, ctx, entry, AIR, 1.013, DiveMode.OC)
        ndl = entry.ndl_calc
        self.assertNotEqual(snapshot, state)

        state.restore(snapshot)
        self.assertEqual(snapshot, state)
        self.engine.calculate_ndl_tts(state, ctx, entry, AIR, 1.013, DiveMode.OC)
        self.assertEqual(ndl, entry.ndl_calc)
        self.assertTrue(ndl > 0)



class VPMBTestCase(unittest.TestCase):
    """
    Decompression engine with VPM-B decompression model tests.
    """
    def setUp(self):
        self.prefs = Preferences()
        self.prefs.deco_mode = DecoMode.VPMB
        self.engine = DecoEngine(self.prefs)


    def test_short_dive(self):
        """
        Test VPM-B calculation of a short dive
        """
        ctx, entries = _prepare(_dive(18000, 900), self.prefs)
        count = self.engine.calculate(ctx, entries)
        self.assertTrue(1 <= count <= 10)
        self.assertTrue(all(e.ceiling >= 0 for e in entries))


    def test_iteration_limit(self):
        """
        Test VPM-B iterations limit with oscillating decompression time
        """
        ctx, entries = _prepare(_dive(18000, 600), self.prefs)
        f = mock.MagicMock(side_effect=itertools.cycle([600, 1200]))
        with mock.patch.object(self.engine, '_next_deco_time', f):
            with self.assertLogs('decoprofile.engine', level='INFO'):
                count = self.engine.calculate(ctx, entries)
        self.assertEqual(10, count)
        self.assertEqual(10, f.call_count)


    def test_gradients_kept(self):
        """
        Test VPM-B gradients kept between iterations
        """
        ctx, entries = _prepare(_dive(18000, 900), self.prefs)
        model = self.engine.model
        events = []
        deco_times = [600, 1200, 1200]
        tolerance = model.tolerance
        next_gradient = model.next_gradient
        start_gradient = mock.MagicMock(wraps=model.start_gradient)

        def deco_time(*args):
            events.append(('deco', start_gradient.call_count))
            return deco_times.pop(0)

        def gradient(state, *args):
            next_gradient(state, *args)
            events.append(('next', list(state.bottom_n2_gradient)))

        def tolerated(state, *args):
            events.append(('tol', list(state.bottom_n2_gradient)))
            return tolerance(state, *args)

        with mock.patch.object(self.engine, '_next_deco_time', side_effect=deco_time), \
                mock.patch.object(model, 'tolerance', side_effect=tolerated), \
                mock.patch.object(model, 'next_gradient', side_effect=gradient), \
                mock.patch.object(model, 'start_gradient', start_gradient):
            count = self.engine.calculate(ctx, entries)

        self.assertEqual(3, count)

        # gradients are started during the first iteration only
        idx = next(i for i, (name, _) in enumerate(events) if name == 'deco')
        self.assertEqual(('deco', start_gradient.call_count), events[idx])
        self.assertTrue(start_gradient.call_count > 0)

        # the next iteration uses gradients calculated for new deco time
        name, computed = events[idx + 1]
        self.assertEqual('next', name)
        self.assertTrue(all(g > 0 for g in computed))
        self.assertEqual(('tol', computed), events[idx + 2])


# vim: sw=4:et:ai
