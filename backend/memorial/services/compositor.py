"""
Memorial Backend - Grid Compositor
===================================

What:  Lays out up to five 200x200 tiles on a fixed 800x500 canvas and
       flattens them into one RGB image.
How:   Pure Pillow computation: a background-filled canvas, one paste per
       tile at a position derived only from the tile's index.
Who:   Called by MemorialService once every tile has been acquired.

Layout (tile 200, padding 20, canvas width 800):

    row 0 (top=40):   [ 80 ]  [ 300 ]  [ 520 ]     tiles 0, 1, 2
    row 1 (top=300):      [ 190 ]  [ 410 ]         tiles 3, 4

    Each row is centered for its full capacity (3 slots on row 0, 2 slots on
    row 1), so a partial row keeps the slot positions of a full one: a single
    tile sits at left=80, not in the middle of the canvas.

The compositor performs no I/O and never fails for 0-5 tiles.
"""

import io
from dataclasses import dataclass
from typing import Sequence, Tuple

from PIL import Image

# ── Geometry ──────────────────────────────────────────────────────────────
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 500
TILE_SIZE = 200
TILE_PADDING = 20
MAX_TILES = 5

ROW_TOPS = (40, 300)
ROW_CAPACITY = (3, 2)

# ── Colors ────────────────────────────────────────────────────────────────
BACKGROUND_COLOR = (0xF0, 0xF4, 0xF8)   # #f0f4f8
PLACEHOLDER_COLOR = (0xBD, 0xBD, 0xBD)  # #bdbdbd


@dataclass(frozen=True)
class SourceTile:
    """One resolved grid tile: a 200x200 RGB bitmap and the handle it shows."""

    image: Image.Image
    owner_handle: str
    is_placeholder: bool = False


def make_placeholder(owner_handle: str) -> SourceTile:
    """Solid #bdbdbd tile used when a profile picture can't be obtained."""
    image = Image.new("RGB", (TILE_SIZE, TILE_SIZE), PLACEHOLDER_COLOR)
    return SourceTile(image=image, owner_handle=owner_handle, is_placeholder=True)


def tile_position(index: int) -> Tuple[int, int]:
    """
    Return the (left, top) canvas offset of the tile at `index` (0-4).

    Examples:
        >>> [tile_position(i) for i in range(5)]
        [(80, 40), (300, 40), (520, 40), (190, 300), (410, 300)]
    """
    row = 0 if index < 3 else 1
    col = index % 3
    top = ROW_TOPS[row]
    n = ROW_CAPACITY[row]
    row_width = n * TILE_SIZE + (n - 1) * TILE_PADDING
    left = round((CANVAS_WIDTH - row_width) / 2 + (TILE_SIZE + TILE_PADDING) * col)
    return left, top


def compose_grid(tiles: Sequence[SourceTile]) -> Image.Image:
    """
    Flatten `tiles` onto a fresh background canvas in index order.

    Args:
        tiles: Resolved tiles, already truncated by the caller. Anything
               past index 4 is ignored.

    Returns:
        An 800x500 RGB image. With no tiles, the plain background.
    """
    canvas = Image.new("RGB", (CANVAS_WIDTH, CANVAS_HEIGHT), BACKGROUND_COLOR)
    for index, tile in enumerate(tiles[:MAX_TILES]):
        canvas.paste(tile.image, tile_position(index))
    return canvas


def encode_image(image: Image.Image, image_format: str = "PNG") -> bytes:
    """Serialize the composite into an in-memory buffer for upload."""
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()
