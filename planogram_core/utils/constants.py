"""System-wide constants"""

# Canvas settings
INCH_TO_PIXEL = 10.0  # default pixels per inch
CANVAS_PADDING = 50  # border padding in pixels
GRID_SIZE = 1.0  # grid spacing in inches
SNAP_THRESHOLD_PX = 20.0  # magnetize distance to neighbouring products

# Float tolerance for unit conversions and span comparisons
UNIT_TOLERANCE = 1e-6

# Placement settings
MIN_FACINGS = 1
ENFORCE_SECTION_BOUNDS = True

# Persistence settings
DEFAULT_IO_TIMEOUT = 10.0  # seconds
SNAPSHOT_PROTOCOL_VERSION = 1
INITIAL_VERSION = 0  # version of a planogram that was never saved

# Planogram lifecycle: status -> statuses it may move to
STATUS_TRANSITIONS = {
    'draft': ('active', 'archived'),
    'active': ('archived',),
    'archived': ('draft',),
}
