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
Cylinder pressure reconstruction tests.
"""

from decoprofile.dive import Cylinder, DiveComputer, Event, Sample
from decoprofile.gaspressure import CylinderUse, setup_gas_sensor_pressure, \
    add_plot_pressure, fill_interpolated_pressures
from decoprofile.profile import populate_plot_entries

from .tools import AIR, EAN50, _ctx, _dive, _entries, _gas_change_dive

import unittest


class GasSensorPressureTestCase(unittest.TestCase):
    """
    Start and end pressure of cylinders tests.
    """
    def setUp(self):
        self.dive = _gas_change_dive()
        self.ctx = _ctx(self.dive)
        self.entries = populate_plot_entries(self.ctx, 1680)


    def test_gas_change(self):
        """
        Test start and end pressures of cylinders with gas change
        """
        result = setup_gas_sensor_pressure(self.ctx, self.entries)
        self.assertEqual(
            [CylinderUse(0, 900, True), CylinderUse(900, None, True)], result
        )

        entries = self.entries
        self.assertEqual(200000, entries[0].pressure[0])
        e = next(e for e in entries if e.sec == 900)
        self.assertEqual(120000, e.pressure[0])
        self.assertEqual(200000, e.pressure[1])
        self.assertEqual(150000, entries[-1].pressure[1])

        e = next(e for e in entries if e.sec == 450)
        self.assertEqual([0, 0], e.pressure)


    def test_not_interesting(self):
        """
        Test cylinders without pressure change are not interesting
        """
        self.dive.cylinders[0] = Cylinder(AIR, 200000, 200000, 12000)
        self.dive.cylinders[1] = Cylinder(EAN50, 0, 150000, 7000)
        result = setup_gas_sensor_pressure(self.ctx, self.entries)
        self.assertEqual([False, False], [r.interesting for r in result])
        self.assertTrue(all(e.pressure == [0, 0] for e in self.entries))


    def test_other_dive_computer(self):
        """
        Test cylinder used by other dive computer is not interesting
        """
        cylinders = [
            Cylinder(AIR, 200000, 120000, 12000),
            Cylinder(EAN50, 200000, 150000, 7000),
        ]
        dive = _dive(30000, 1500, cylinders=cylinders)
        samples = dive.dcs[0].samples
        dive.dcs.append(DiveComputer(samples, [Event('gaschange', 900, 50, 1)]))

        ctx = _ctx(dive)
        entries = populate_plot_entries(ctx, 1680)
        result = setup_gas_sensor_pressure(ctx, entries)
        self.assertEqual([True, False], [r.interesting for r in result])
        self.assertEqual(120000, entries[-1].pressure[0])


    def test_gas_change_by_gas_mix(self):
        """
        Test cylinder matched by gas mix of gas change is not interesting
        """
        cylinders = [
            Cylinder(AIR, 200000, 120000, 12000),
            Cylinder(EAN50, 200000, 150000, 7000),
        ]
        events = [Event('gaschange', 900, 50, -1)]
        dive = _dive(30000, 1500, cylinders=cylinders, events=events)

        ctx = _ctx(dive)
        entries = populate_plot_entries(ctx, 1680)
        result = setup_gas_sensor_pressure(ctx, entries)
        self.assertEqual([True, False], [r.interesting for r in result])
        self.assertTrue(all(e.pressure[1] == 0 for e in entries))


    def test_add_plot_pressure(self):
        """
        Test cylinder pressure written into profile entry
        """
        entries = _entries((0, 0), (10, 1000), (20, 2000))
        add_plot_pressure(entries, 5, 0, 200000)
        self.assertEqual(200000, entries[1].pressure[0])

        add_plot_pressure(entries, 30, 0, 100000)
        self.assertEqual(100000, entries[2].pressure[0])

        add_plot_pressure(entries, None, 0, 90000)
        self.assertEqual(90000, entries[2].pressure[0])



class InterpolatedPressureTestCase(unittest.TestCase):
    """
    Interpolated cylinder pressure tests.
    """
    def test_interpolation(self):
        """
        Test cylinder pressure interpolation between known pressures
        """
        dive = _gas_change_dive()
        ctx = _ctx(dive)
        entries = populate_plot_entries(ctx, 1680)
        setup_gas_sensor_pressure(ctx, entries)
        fill_interpolated_pressures(entries, 2)

        e = next(e for e in entries if e.sec == 450)
        self.assertEqual(160000, e.interpolated[0])
        self.assertEqual(160000, e.get_pressure(0))
        self.assertEqual(0, e.pressure[0])
        self.assertEqual(0, e.interpolated[1])

        e = next(e for e in entries if e.sec == 1500)
        self.assertTrue(150000 < e.get_pressure(1) < 200000)
        self.assertEqual(0, e.get_pressure(0))

        # known pressures are kept
        e = next(e for e in entries if e.sec == 900)
        self.assertEqual(120000, e.get_pressure(0))
        self.assertEqual(0, e.interpolated[0])


    def test_sensor_pressure(self):
        """
        Test cylinder pressure interpolation between sensor readings
        """
        entries = _entries((0, 0), (10, 1000), (20, 2000), (30, 2000))
        entries[0].pressure[0] = 200000
        entries[3].pressure[0] = 197000
        fill_interpolated_pressures(entries, 1)
        self.assertEqual(199000, entries[1].interpolated[0])
        self.assertEqual(198000, entries[2].interpolated[0])


# vim: sw=4:et:ai
