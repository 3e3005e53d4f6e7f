# Adjacency defaults
DEFAULT_TOLERANCE_METERS = 0.1
METERS_PER_DEGREE = 111320.0
BEARING_EPSILON_DEGREES = 0.1
OPPOSITE_BEARING_MIN = 170.0
OPPOSITE_BEARING_MAX = 190.0
MIN_EDGE_LENGTH = 0.0000001

# Spatial index defaults
SPATIAL_INDEX_THRESHOLD = 50
MAX_GRID_SIZE = 20
ZONES_PER_CELL = 5

# Merge defaults
DEFAULT_SIMPLIFY = False
DEFAULT_SIMPLIFY_TOLERANCE = 0.0001
DEFAULT_PRESERVE_PROPERTIES = False

# Output property names
MERGED_ZONE_IDS = 'mergedZoneIds'
MERGED_ZONE_NAMES = 'mergedZoneNames'

# Warning kinds
INVALID_GEOMETRY = 'invalid_geometry'
UNION_FAILURE = 'union_failure'
PROPERTY_MERGE_FAILURE = 'property_merge_failure'

# Configuration defaults
DEFAULT_ID_PROPERTY = 'id'
DEFAULT_NAME_PROPERTY = 'name'
DEFAULT_USE_SPATIAL_INDEX = 'auto'
DEFAULT_GRID_SIZE = 0
DEFAULT_LOG_FILE = 'zonemerge.log'

# Configuration sections
SOURCE_SECTION_NAME = 'Source'
MERGE_SECTION_NAME = 'Merge'
SETTINGS_SECTION_NAME = 'Settings'
