"""
Read zone records from GeoJSON files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from geozones.zonemerge import constants
from geozones.zonemerge.geometry import bbox_from_sequence, geometry_from_mapping
from geozones.zonemerge.models import Zone

logger = logging.getLogger(__name__)

ZONE_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")


def zone_from_feature(
    feature: Dict[str, Any],
    position: int,
    id_property: str = constants.DEFAULT_ID_PROPERTY,
    name_property: str = constants.DEFAULT_NAME_PROPERTY,
) -> Zone:
    """
    Build a Zone from a GeoJSON Feature mapping.

    The id comes from the id_property, then the Feature's own id, then the
    feature's position in the file. The name falls back to the id.
    """
    properties = dict(feature.get("properties") or {})
    zone_id = properties.get(id_property, feature.get("id"))
    if zone_id is None:
        zone_id = f"zone-{position}"
    zone_id = str(zone_id)
    name = str(properties.get(name_property, zone_id))

    return Zone(
        zone_id,
        name,
        geometry_from_mapping(feature["geometry"]),
        bbox=bbox_from_sequence(feature.get("bbox")),
        properties=properties,
    )


def load_zones(
    filepath: Path,
    id_property: str = constants.DEFAULT_ID_PROPERTY,
    name_property: str = constants.DEFAULT_NAME_PROPERTY,
) -> List[Zone]:
    """
    Load zones from a GeoJSON FeatureCollection.

    Features whose geometry is not a Polygon or MultiPolygon are skipped
    with a warning.

    Args:
        filepath: Path to the GeoJSON file
        id_property: Feature property holding the zone id
        name_property: Feature property holding the zone name

    Returns:
        Zones in file order

    Raises:
        ValueError: If the file is not a GeoJSON FeatureCollection
    """
    with open(filepath) as f:
        document = json.load(f)

    if document.get("type") != "FeatureCollection":
        raise ValueError(f"{filepath} is not a GeoJSON FeatureCollection")

    zones = []
    for position, feature in enumerate(document.get("features", [])):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") not in ZONE_GEOMETRY_TYPES:
            logger.warning(
                f"Skipping feature {position} in {filepath}: "
                f"unsupported geometry type {geometry.get('type')}"
            )
            continue
        zones.append(zone_from_feature(feature, position, id_property, name_property))

    logger.info(f"Loaded {len(zones)} zones from {filepath}")
    return zones
