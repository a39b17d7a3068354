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
DecoProfile constants.

Units used by the library

- time [s]
- depth [mm]
- pressure [mbar] (tissue model works with [bar])
- temperature [mK]
- volume [ml]
- gas fractions [permille]
"""

import math

LOG_2 = math.log(2)

NUM_COMPARTMENTS = 16
MAX_CYLINDERS = 20
MAX_O2_SENSORS = 3

SURFACE_PRESSURE = 1013     # mbar
SEAWATER_SALINITY = 10300   # g/10l
FRESHWATER_SALINITY = 10000 # g/10l
ATM = 1013.25               # mbar

O2_IN_AIR = 209 # permille
N2_IN_AIR = 781 # permille

# gas density at 1 bar [mg/l]
O2_DENSITY = 1331
N2_DENSITY = 1165
HE_DENSITY = 166

ZERO_C_IN_MKELVIN = 273150

SURFACE_THRESHOLD = 750 # mm

# entry raster, padding entries at each end of a dive profile
RASTER = 10
PADDING = 2

# tissue model
WATER_VAPOUR_PRESSURE = 0.0627 # bar
AMB_PERCENTAGE = 50.0

# deco solver
MAX_PROFILE_DECO = 7200
DECO_TIME_STEP = 20
NDL_TTS_INTERVAL = 30
MAX_ITERATIONS = 10
DECO_TIME_TOLERANCE = 30
DECO_STOP_STEP = 3000 # mm

# smoothing and classification
SPEED_WINDOW = 15
MINMAX_HALF_INTERVAL = 9 * 30

# sac estimation window
SAC_WINDOW_BEFORE = 30
SAC_WINDOW_AFTER = 60

# sensor voting tolerance [mbar]
O2_SENSOR_DIFF_LIMIT = 100

# vim: sw=4:et:ai
