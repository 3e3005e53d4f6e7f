"""
Uniform grid index over zone bounding boxes.

The grid is sized from the combined extent of every indexed box, so a
query that looks at a zone's own cells plus one ring of neighbouring cells
returns every zone whose box could possibly touch it. Results are
candidates only; the adjacency detector makes the final call.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from geozones.zonemerge import constants
from geozones.zonemerge.models import BBox

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


def default_grid_size(zone_count: int) -> int:
    """
    Cells per axis for a zone set of the given size.

    Aims for about ZONES_PER_CELL zones per cell, capped at MAX_GRID_SIZE so
    memory stays bounded for large inputs.
    """
    if zone_count <= 0:
        return 1
    return max(
        1,
        min(
            constants.MAX_GRID_SIZE,
            math.ceil(math.sqrt(zone_count / constants.ZONES_PER_CELL)),
        ),
    )


def should_use_spatial_index(zone_count: int, requested: Optional[bool] = None) -> bool:
    if requested is not None:
        return requested
    return zone_count > constants.SPATIAL_INDEX_THRESHOLD


class GridSpatialIndex:
    """
    Grid-bucketed index answering "which zones might touch zone i".

    Entries in bboxes that are None (zones with invalid geometry) are not
    indexed and never appear as candidates. The index is read-only once
    built.
    """

    def __init__(
        self,
        bboxes: Sequence[Optional[BBox]],
        grid_size: int,
        margin: float = 0.0,
    ):
        if grid_size < 1:
            raise ValueError(f"grid_size must be at least 1, got {grid_size}")

        self.grid_size = grid_size
        self.margin = margin
        self._size = len(bboxes)
        self._cells: Dict[int, List[Cell]] = {}
        self._grid: Dict[Cell, List[int]] = defaultdict(list)

        indexed = [i for i, bbox in enumerate(bboxes) if bbox is not None]
        if not indexed:
            self.bounds = None
            return

        boxes = np.array([bboxes[i] for i in indexed], dtype=float) + np.array(
            [-margin, -margin, margin, margin]
        )
        self.bounds = BBox(
            float(boxes[:, 0].min()),
            float(boxes[:, 1].min()),
            float(boxes[:, 2].max()),
            float(boxes[:, 3].max()),
        )
        self.cell_width = (self.bounds.max_lon - self.bounds.min_lon) / grid_size
        self.cell_height = (self.bounds.max_lat - self.bounds.min_lat) / grid_size

        min_x = self._cell_positions(boxes[:, 0], self.bounds.min_lon, self.cell_width)
        max_x = self._cell_positions(boxes[:, 2], self.bounds.min_lon, self.cell_width)
        min_y = self._cell_positions(boxes[:, 1], self.bounds.min_lat, self.cell_height)
        max_y = self._cell_positions(boxes[:, 3], self.bounds.min_lat, self.cell_height)

        for row, index in enumerate(indexed):
            cells = [
                (x, y)
                for x in range(min_x[row], max_x[row] + 1)
                for y in range(min_y[row], max_y[row] + 1)
            ]
            self._cells[index] = cells
            for cell in cells:
                self._grid[cell].append(index)

        logger.debug(
            "Indexed %d zones into %d of %d grid cells",
            len(indexed),
            len(self._grid),
            grid_size * grid_size,
        )

    def _cell_positions(self, values, origin: float, cell_size: float) -> List[int]:
        # A flat axis has a single column of cells.
        if cell_size <= 0:
            return [0] * len(values)
        positions = np.floor((values - origin) / cell_size).astype(int)
        return np.clip(positions, 0, self.grid_size - 1).tolist()

    def __len__(self) -> int:
        return len(self._cells)

    @property
    def cell_count(self) -> int:
        """Number of non-empty cells."""
        return len(self._grid)

    def cells_for(self, index: int) -> List[Cell]:
        self._check_index(index)
        return list(self._cells.get(index, []))

    def candidates_for(self, index: int) -> List[int]:
        """
        Zones sharing a cell, or a neighbouring cell, with zone `index`.

        Returns ascending zone indices, never including `index` itself.
        """
        self._check_index(index)
        neighbours: Set[int] = set()
        for cell in self._expanded_cells(self._cells.get(index, [])):
            neighbours.update(self._grid.get(cell, ()))
        neighbours.discard(index)
        return sorted(neighbours)

    def _expanded_cells(self, cells: List[Cell]) -> Set[Cell]:
        expanded = set()
        for cell_x, cell_y in cells:
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    x, y = cell_x + dx, cell_y + dy
                    if 0 <= x < self.grid_size and 0 <= y < self.grid_size:
                        expanded.add((x, y))
        return expanded

    def _check_index(self, index: int):
        if not 0 <= index < self._size:
            raise IndexError(f"Zone index {index} out of range [0, {self._size - 1}]")
