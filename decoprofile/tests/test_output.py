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
Dense dive profile output tests.
"""

import decoprofile
from decoprofile.config import Preferences, DecoMode, Units
from decoprofile.dive import Dive, Cylinder, DiveType
from decoprofile.gas import gas_volume
from decoprofile.output import get_depth_units, get_pressure_units, \
    get_temp_units, get_volume_units, get_vertical_speed_units, entry_lines, \
    plot_details, compare_entries, format_comparison, write_csv
from decoprofile.profile import Entry, PlotInfo

from .tools import AIR, EAN50, _flat_dive

import io
import unittest


class UnitsTestCase(unittest.TestCase):
    """
    Display units conversion tests.
    """
    def setUp(self):
        self.metric = Units()
        self.imperial = Units.imperial()


    def test_depth(self):
        """
        Test depth conversion
        """
        self.assertEqual((18.0, 1, 'm'), get_depth_units(18000, self.metric))
        v, decimals, unit = get_depth_units(18000, self.imperial)
        self.assertAlmostEqual(59.055, v, 3)
        self.assertEqual((0, 'ft'), (decimals, unit))


    def test_pressure(self):
        """
        Test pressure conversion
        """
        self.assertEqual((200, 'bar'), get_pressure_units(200000, self.metric))
        self.assertEqual((2901, 'psi'), get_pressure_units(200000, self.imperial))


    def test_temperature(self):
        """
        Test temperature conversion
        """
        v, unit = get_temp_units(293150, self.metric)
        self.assertAlmostEqual(20.0, v)
        self.assertEqual('°C', unit)
        v, unit = get_temp_units(293150, self.imperial)
        self.assertAlmostEqual(68.0, v)
        self.assertEqual('°F', unit)


    def test_volume(self):
        """
        Test volume conversion
        """
        self.assertEqual((12.0, 1, 'ℓ'), get_volume_units(12000, self.metric))
        v, decimals, unit = get_volume_units(28317, self.imperial)
        self.assertAlmostEqual(1.0, v, 4)
        self.assertEqual((2, 'cuft'), (decimals, unit))


    def test_vertical_speed(self):
        """
        Test vertical speed conversion
        """
        v, decimals, unit = get_vertical_speed_units(150, self.metric)
        self.assertAlmostEqual(9.0, v)
        self.assertEqual('m/min', unit)

        self.metric.vertical_speed_time = Units.SECONDS
        v, decimals, unit = get_vertical_speed_units(150, self.metric)
        self.assertAlmostEqual(0.15, v)
        self.assertEqual('m/s', unit)



class EntryLinesTestCase(unittest.TestCase):
    """
    Profile entry summary tests.
    """
    def setUp(self):
        self.prefs = Preferences()
        self.dive = Dive([
            Cylinder(AIR, 200000, 100000, 12000),
            Cylinder(EAN50, 200000, 150000, 7000),
        ])
        self.entry = Entry(2, 754, 18000)
        self.entry.pressure[0] = 150000
        self.entry.temperature = 293150
        self.entry.speed = -150
        self.pi = PlotInfo()
        self.pi.entry = [self.entry]


    def _lines(self):
        return entry_lines(self.dive, self.pi, 0, self.prefs)


    def test_basic(self):
        """
        Test summary of profile entry
        """
        expected = [
            '@: 12:34', 'D: 18.0m', 'P: 150bar (air)', 'T: 20.0°C',
            'V: 9.0m/min',
        ]
        self.assertEqual(expected, self._lines())


    def test_descent(self):
        """
        Test descent speed is negative
        """
        self.entry.speed = 150
        self.assertIn('V: -9.0m/min', self._lines())


    def test_ndl(self):
        """
        Test no decompression limit summary
        """
        self.entry.ndl = 600
        self.entry.tts = 130
        lines = self._lines()
        self.assertIn('NDL: 10min', lines)
        self.assertIn('TTS: 3min', lines)


    def test_deco_stop(self):
        """
        Test decompression and safety stop summary
        """
        self.entry.stopdepth = 3000
        self.entry.stoptime = 120
        self.entry.ndl = 0
        self.assertIn('Deco: 2min @ 3m', self._lines())

        self.entry.ndl = 300
        self.assertIn('Safety stop: 2min @ 3m', self._lines())

        self.entry.stoptime = 0
        self.assertIn('Safety stop: unknown time @ 3m', self._lines())


    def test_calculated(self):
        """
        Test calculated decompression summary
        """
        self.prefs.calc_ndl_tts = True
        self.entry.ndl_calc = 7200
        self.assertIn('NDL: >2h (calc)', self._lines())

        self.entry.ndl_calc = 0
        self.entry.in_deco_calc = True
        self.entry.stopdepth_calc = 6000
        self.entry.stoptime_calc = 240
        self.entry.tts_calc = 610
        lines = self._lines()
        self.assertIn('Deco: 4min @ 6m (calc)', lines)
        self.assertIn('TTS: 11min (calc)', lines)


    def test_ceiling(self):
        """
        Test ceiling of tissue compartments
        """
        self.prefs.calc_all_tissues = True
        self.entry.ceiling = 3000
        self.entry.ceilings[0] = 3000
        self.entry.surface_gf = 110.4
        lines = self._lines()
        self.assertIn('Surface GF 110%', lines)
        self.assertIn('Calculated ceiling 3m', lines)
        self.assertIn('Tissue 4min: 3.0m', lines)

        self.prefs.deco_mode = DecoMode.VPMB
        self.assertIn('Tissue 5min: 3.0m', self._lines())

        self.prefs.decoinfo = False
        self.assertNotIn('Calculated ceiling 3m', self._lines())


    def test_partial_pressures(self):
        """
        Test partial pressures summary
        """
        self.prefs.pp_po2 = True
        self.prefs.mod = True
        self.entry.pressures = self.entry.pressures._replace(o2=0.59, n2=2.24)
        self.entry.mod = 65730
        lines = self._lines()
        self.assertIn('pO₂: 0.59bar', lines)
        self.assertIn('MOD: 66m', lines)
        self.assertNotIn('pN₂: 2.24bar', lines)


    def test_ead(self):
        """
        Test equivalent depths of nitrox dive
        """
        self.prefs.ead = True
        self.pi.dive_type = DiveType.NITROX
        self.entry.ead = 15600
        self.entry.eadd = 15000
        self.entry.density = 3.5
        lines = self._lines()
        self.assertIn('EAD: 16m', lines)
        self.assertIn('EADD: 15m / 3.5g/ℓ', lines)


    def test_extra(self):
        """
        Test heart rate, bearing and mean depth summary
        """
        self.prefs.hrgraph = True
        self.entry.heartbeat = 90
        self.entry.bearing = 0
        self.entry.running_sum = 754 * 15000
        lines = self._lines()
        self.assertIn('heart rate: 90', lines)
        self.assertIn('bearing: 0', lines)
        self.assertEqual('mean depth to here 15.0m', lines[-1])


    def test_imperial(self):
        """
        Test summary in imperial units
        """
        self.prefs.units = Units.imperial()
        lines = self._lines()
        self.assertEqual('D: 59.1ft', lines[1])
        self.assertEqual('P: 2176psi (air)', lines[2])



class ProfileOutputTestCase(unittest.TestCase):
    """
    Dense dive profile details and comparison tests.
    """
    @classmethod
    def setUpClass(cls):
        cls.dive = _flat_dive()
        cls.prefs = Preferences()
        cls.pi = decoprofile.create_plot_info(cls.dive, cls.dive.dcs[0], cls.prefs)


    def _index(self, sec):
        return next(i for i, e in enumerate(self.pi.entry) if e.sec == sec)


    def test_plot_details(self):
        """
        Test profile entry details at given time
        """
        idx, text = plot_details(self.dive, self.pi, 605, self.prefs)
        self.assertEqual(610, self.pi.entry[idx].sec)
        self.assertTrue(text.startswith('@: 10:10\nD: 18.0m\n'))


    def test_plot_details_start(self):
        """
        Test profile entry details skip padding entries
        """
        idx, text = plot_details(self.dive, self.pi, 0, self.prefs)
        self.assertEqual(2, idx)


    def test_plot_details_empty(self):
        """
        Test profile details of profile without data
        """
        pi = PlotInfo()
        pi.entry = [Entry(1) for i in range(4)]
        self.assertEqual((0, ''), plot_details(self.dive, pi, 0, self.prefs))


    def test_compare(self):
        """
        Test comparison of profile entries 10 minutes apart
        """
        idx1 = self._index(600)
        idx2 = self._index(1200)
        cmp = compare_entries(self.dive, self.pi, idx2, idx1)

        self.assertEqual(600, cmp.delta_time)
        self.assertEqual(0, cmp.delta_depth)
        self.assertEqual(18000, cmp.min_depth)
        self.assertEqual(18000, cmp.max_depth)
        self.assertEqual(18000, cmp.avg_depth)
        self.assertEqual(0, cmp.avg_speed)

        p1 = self.pi.entry[idx1].get_pressure(0)
        p2 = self.pi.entry[idx2].get_pressure(0)
        self.assertEqual(p1 - p2, cmp.bar_used)

        cyl = self.dive.cylinders[0]
        volume = gas_volume(cyl, p1) - gas_volume(cyl, p2)
        atm = 2832 / 1013.25
        expected = volume / atm / 10
        self.assertAlmostEqual(expected, cmp.sac, delta=1)


    def test_compare_invalid(self):
        """
        Test comparison of invalid profile entries
        """
        idx = self._index(600)
        self.assertIsNone(compare_entries(self.dive, self.pi, idx, idx))
        self.assertIsNone(compare_entries(self.dive, self.pi, -1, idx))


    def test_compare_descent(self):
        """
        Test comparison of profile entries during descent
        """
        cmp = compare_entries(self.dive, self.pi, self._index(0), self._index(120))
        self.assertEqual(18000, cmp.delta_depth)
        self.assertEqual(0, cmp.min_depth)
        self.assertEqual(150, cmp.max_desc_speed)
        self.assertEqual(150, cmp.avg_speed)


    def test_format_comparison(self):
        """
        Test comparison summary
        """
        cmp = compare_entries(self.dive, self.pi, self._index(600), self._index(1200))
        text = format_comparison(cmp, self.prefs.units)
        line1, line2 = text.split('\n')
        self.assertEqual('ΔT:10:00min ΔD:0.0m ↓D:18.0m ↑D:18.0m øD:18.0m', line1)
        self.assertTrue(line2.startswith('↓V:0.00m/min ↑V:0.00m/min øV:0.00m/min ΔP:'))
        self.assertIn(' SAC:', line2)


    def test_csv(self):
        """
        Test dense dive profile saved in CSV file
        """
        f = io.StringIO()
        write_csv(f, self.pi)
        lines = f.getvalue().splitlines()
        self.assertEqual(len(self.pi.entry) + 1, len(lines))
        self.assertTrue(lines[0].startswith('time,depth,smoothed,'))
        self.assertTrue(lines[0].endswith(',pressure_0'))


# vim: sw=4:et:ai
