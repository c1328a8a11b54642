"""Physical constants used throughout SETT Pro.

All values in SI units unless otherwise noted.
"""

import math

# Atmospheric
P_ATM = 101325.0  # Pa, standard atmospheric pressure

# Mathematical
TWO_PI = 2.0 * math.pi
DEG_TO_RAD = math.pi / 180.0
