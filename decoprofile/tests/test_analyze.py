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
Dense dive profile post-processing tests.
"""

from decoprofile.analyze import Velocity, velocity, div_trunc, \
    analyze_plot_info, analyze_minmax

from .tools import _entries

import unittest


class VelocityTestCase(unittest.TestCase):
    """
    Vertical speed classification tests.
    """
    def test_descent(self):
        """
        Test descent speed classification
        """
        self.assertEqual(Velocity.STABLE, velocity(0))
        self.assertEqual(Velocity.STABLE, velocity(24))
        self.assertEqual(Velocity.SLOW, velocity(25))
        self.assertEqual(Velocity.SLOW, velocity(150))
        self.assertEqual(Velocity.MODERATE, velocity(152))
        self.assertEqual(Velocity.FAST, velocity(400))
        self.assertEqual(Velocity.CRAZY, velocity(507))


    def test_ascent(self):
        """
        Test ascent speed classification
        """
        self.assertEqual(Velocity.STABLE, velocity(-25))
        self.assertEqual(Velocity.SLOW, velocity(-30))
        self.assertEqual(Velocity.MODERATE, velocity(-100))
        self.assertEqual(Velocity.FAST, velocity(-200))
        self.assertEqual(Velocity.CRAZY, velocity(-400))


    def test_div_trunc(self):
        """
        Test integer division truncated toward zero
        """
        self.assertEqual(3, div_trunc(7, 2))
        self.assertEqual(-3, div_trunc(-7, 2))
        self.assertEqual(-3, div_trunc(7, -2))
        self.assertEqual(3, div_trunc(-7, -2))
        self.assertEqual(0, div_trunc(-1, 10))



class AnalyzePlotInfoTestCase(unittest.TestCase):
    """
    Depth smoothing and vertical speed tests.
    """
    def test_smoothing_flat(self):
        """
        Test smoothing of flat profile
        """
        entries = _entries(*((t, 18000) for t in range(0, 70, 10)))
        analyze_plot_info(entries)

        smoothed = [e.smoothed for e in entries]
        self.assertEqual([0, 0, 18000, 18000, 18000, 0, 0], smoothed)
        self.assertTrue(all(e.speed == 0 for e in entries))


    def test_smoothing_peak(self):
        """
        Test smoothing of depth peak
        """
        entries = _entries(
            (0, 0), (10, 0), (20, 9000), (30, 0), (40, 0), (50, 0), (60, 0)
        )
        analyze_plot_info(entries)
        self.assertEqual([3000, 2000, 1000], [e.smoothed for e in entries[2:5]])


    def test_speed(self):
        """
        Test vertical speed of profile entries
        """
        entries = _entries((0, 0), (10, 0), (20, 0), (30, 5000), (40, 2000))
        analyze_plot_info(entries)

        self.assertEqual(500, entries[3].speed)
        self.assertEqual(Velocity.FAST, entries[3].velocity)
        self.assertEqual(-300, entries[4].speed)


    def test_speed_window(self):
        """
        Test speed classification over at least 15 seconds
        """
        entries = _entries((0, 0), (10, 0), (20, 0), (30, 3000))
        analyze_plot_info(entries)

        self.assertEqual(300, entries[3].speed)
        # 3m over 20s
        self.assertEqual(Velocity.SLOW, entries[3].velocity)


    def test_same_time(self):
        """
        Test speed of entries with the same time
        """
        entries = _entries((0, 0), (10, 0), (20, 1000), (20, 2000))
        analyze_plot_info(entries)

        self.assertEqual(0, entries[3].speed)
        self.assertEqual(Velocity.STABLE, entries[3].velocity)



class AnalyzeMinMaxTestCase(unittest.TestCase):
    """
    Min and max depth within time window tests.
    """
    def setUp(self):
        self.entries = _entries(
            (0, 0), (100, 5000), (200, 10000), (300, 3000), (400, 0)
        )


    def test_minmax(self):
        """
        Test min and max depth indexes
        """
        analyze_minmax(self.entries, 150)

        self.assertEqual((0, 1), (self.entries[0].min, self.entries[0].max))
        self.assertEqual((3, 2), (self.entries[2].min, self.entries[2].max))
        self.assertEqual((4, 3), (self.entries[4].min, self.entries[4].max))


    def test_minmax_default(self):
        """
        Test min and max depth indexes within 9 minutes window
        """
        analyze_minmax(self.entries)
        result = [(e.min, e.max) for e in self.entries]
        self.assertEqual([(0, 2), (0, 2), (0, 2), (4, 2), (4, 2)], result)


# vim: sw=4:et:ai
