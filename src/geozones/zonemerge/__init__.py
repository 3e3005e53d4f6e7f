__version__ = "v1.0.0"


__all__ = [
    "__version__",
    "adjacency",
    "config",
    "constants",
    "geometry",
    "grouping",
    "merge",
    "models",
    "readers",
    "spatial_index",
    "union_find",
    "is_adjacent",
    "merge_adjacent_zones",
    "merge_zones",
    "MergedZoneFeature",
    "MergeOptions",
    "MergeResult",
    "MergeWarning",
    "MultiPolygonGeometry",
    "PolygonGeometry",
    "UnionFind",
    "Zone",
]

from . import adjacency
from . import config
from . import constants
from . import geometry
from . import grouping
from . import merge
from . import models
from . import readers
from . import spatial_index
from . import union_find
from .adjacency import is_adjacent
from .merge import merge_adjacent_zones, merge_zones
from .models import (
    MergedZoneFeature,
    MergeOptions,
    MergeResult,
    MergeWarning,
    MultiPolygonGeometry,
    PolygonGeometry,
    Zone,
)
from .union_find import UnionFind
