"""
A6Cutter - Tile Geometry

Pure geometry for cutting a page into A6 tiles: rectangles, the two fixed
tile specifications and the crop-rectangle planner. No PDF dependencies.
"""

import math
from dataclasses import dataclass

from reportlab.lib.pagesizes import A6, landscape, portrait

from a6cutter.constants import GRID_OVERHANG_TOLERANCE
from a6cutter.utils.exceptions import InvalidTileSpecError


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in PDF point space (origin bottom-left).

    Attributes:
        x: Left edge
        y: Bottom edge
        width: Horizontal extent
        height: Vertical extent
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height

    @property
    def size(self) -> tuple[float, float]:
        return (self.width, self.height)


@dataclass(frozen=True)
class TileSpec:
    """Physical size of one output tile, in points."""

    width: float
    height: float

    @property
    def size(self) -> tuple[float, float]:
        return (self.width, self.height)


# A6 is 105 x 148 mm; reportlab converts with mm / 25.4 * 72.
A6_PORTRAIT = TileSpec(*portrait(A6))
A6_LANDSCAPE = TileSpec(*landscape(A6))


def tile_spec_for(bounds: Rect) -> TileSpec:
    """Select the A6 orientation that matches the page's aspect ratio.

    Pages wider than tall get landscape tiles; square and tall pages get
    portrait tiles.
    """
    return A6_LANDSCAPE if bounds.is_landscape else A6_PORTRAIT


def grid_size(bounds: Rect, tile: TileSpec) -> tuple[int, int]:
    """Number of tile columns and rows needed to cover *bounds*.

    A remainder thinner than GRID_OVERHANG_TOLERANCE of a tile is left
    uncovered, so an A4 page maps to 2 x 2 A6 tiles and a 300 pt wide page
    (about 1.008 A6 widths) gets 1 column where a plain ceil would give 2.
    Wider overhangs still open a new column or row.

    Args:
        bounds: Page rectangle to cover
        tile: Tile size

    Returns:
        Tuple of (cols, rows), each at least 1.

    Raises:
        InvalidTileSpecError: If the tile has a zero or negative dimension.
    """
    if tile.width <= 0 or tile.height <= 0:
        raise InvalidTileSpecError(tile.width, tile.height)

    cols = max(1, math.ceil(bounds.width / tile.width - GRID_OVERHANG_TOLERANCE))
    rows = max(1, math.ceil(bounds.height / tile.height - GRID_OVERHANG_TOLERANCE))
    return cols, rows


def plan_crops(
    bounds: Rect,
    horizontal_shift: float = 0.0,
    vertical_shift: float = 0.0,
    disable_cutting: bool = False,
    *,
    tile: TileSpec | None = None,
) -> list[Rect]:
    """Compute the ordered crop rectangles for one page.

    Tiles are emitted row-major: every tile of row 0 comes before any tile
    of row 1, and columns run left to right inside a row. Row 0 starts at
    the bounds origin, which is the bottom edge in PDF space. Shifts move every
    crop origin by the same amount. Crops are never clamped to *bounds*, so
    large shifts produce rectangles partly or fully outside the page.

    Args:
        bounds: Effective page rectangle (after rotation)
        horizontal_shift: Offset added to every crop's x, in points
        vertical_shift: Offset added to every crop's y, in points
        disable_cutting: Return the whole page as a single crop
        tile: Tile size override; defaults to the A6 size matching *bounds*

    Returns:
        List of crop rectangles in output order.
    """
    if disable_cutting:
        return [bounds]

    if tile is None:
        tile = tile_spec_for(bounds)

    cols, rows = grid_size(bounds, tile)

    crops: list[Rect] = []
    for row in range(rows):
        for col in range(cols):
            crops.append(
                Rect(
                    x=bounds.x + col * tile.width + horizontal_shift,
                    y=bounds.y + row * tile.height + vertical_shift,
                    width=tile.width,
                    height=tile.height,
                )
            )
    return crops
