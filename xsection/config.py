# config.py
EARTH_RADIUS_KM = 6371.0  # mean radius of the Earth (km)

# A run of samples is split where a spacing exceeds GAP_FACTOR * margin
GAP_FACTOR = 2.5

# How much finer than the native latitude spacing to sample along the arc
GRID_SMOOTHING_FACTOR = 2
# How much finer than the native radial spacing to sample vertically
VERTICAL_ENLARGE_FACTOR = 2

LATITUDE_DECIMALS = 4
LONGITUDE_DECIMALS = 4
RADIUS_DECIMALS = 6
GRID_PRECISION = 4

# Defaults for the property file
DEFAULT_MARGIN_DEG = 2.5
DEFAULT_MARGIN_RADIUS_KM = 25.0
DEFAULT_SCALE = 3.0
DEFAULT_MASK_THRESHOLD = 0.3
DEFAULT_VARIABLE = "Vs"
DEFAULT_SCALAR_TYPE = "Percent"
