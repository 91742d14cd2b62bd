"""
Memorial Backend - Grid Compositor Unit Tests
==============================================

What:  Placement arithmetic, canvas invariants and placeholder tiles.
How:   Solid-color tiles are composed and individual pixels are sampled at
       tile centers and in empty slots.
"""

import io

import pytest
from PIL import Image

from memorial.services.compositor import (
    BACKGROUND_COLOR,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    PLACEHOLDER_COLOR,
    TILE_SIZE,
    SourceTile,
    compose_grid,
    encode_image,
    make_placeholder,
    tile_position,
)

TILE_COLORS = [
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (255, 255, 0),
    (255, 0, 255),
    (0, 255, 255),
]


def _tiles(count):
    return [
        SourceTile(
            image=Image.new("RGB", (TILE_SIZE, TILE_SIZE), TILE_COLORS[i]),
            owner_handle=f"user{i}",
        )
        for i in range(count)
    ]


def _center(index):
    left, top = tile_position(index)
    return left + TILE_SIZE // 2, top + TILE_SIZE // 2


class TestTilePosition:
    def test_row_zero_offsets(self):
        assert [tile_position(i) for i in range(3)] == [(80, 40), (300, 40), (520, 40)]

    def test_row_one_offsets(self):
        assert [tile_position(i) for i in (3, 4)] == [(190, 300), (410, 300)]

    def test_row_one_is_centered_independently_of_row_zero(self):
        left3, _ = tile_position(3)
        left4, _ = tile_position(4)
        # 400px of tiles + 20px gap centered in 800px
        assert left3 == (CANVAS_WIDTH - 420) // 2
        assert left4 - left3 == TILE_SIZE + 20

    def test_rows_do_not_overlap(self):
        _, top0 = tile_position(0)
        _, top3 = tile_position(3)
        assert top3 - (top0 + TILE_SIZE) == 60


class TestComposeGrid:
    @pytest.mark.parametrize("count", [0, 1, 2, 3, 4, 5])
    def test_canvas_is_always_800x500_rgb(self, count):
        canvas = compose_grid(_tiles(count))
        assert canvas.size == (CANVAS_WIDTH, CANVAS_HEIGHT)
        assert canvas.mode == "RGB"

    def test_zero_tiles_is_background_only(self):
        canvas = compose_grid([])
        assert canvas.getcolors() == [(CANVAS_WIDTH * CANVAS_HEIGHT, BACKGROUND_COLOR)]

    def test_single_tile_uses_first_slot(self):
        canvas = compose_grid(_tiles(1))
        assert canvas.getpixel((80, 40)) == TILE_COLORS[0]
        assert canvas.getpixel((279, 239)) == TILE_COLORS[0]
        assert canvas.getpixel((79, 40)) == BACKGROUND_COLOR
        # Middle of the canvas stays empty; the tile is not re-centered
        assert canvas.getpixel((400, 140)) == BACKGROUND_COLOR

    def test_three_tiles_fill_row_zero_only(self):
        canvas = compose_grid(_tiles(3))
        for i in range(3):
            assert canvas.getpixel(_center(i)) == TILE_COLORS[i]
        assert canvas.getpixel((290, 400)) == BACKGROUND_COLOR
        assert canvas.getpixel((510, 400)) == BACKGROUND_COLOR

    def test_four_tiles_put_fourth_in_row_one_left_slot(self):
        canvas = compose_grid(_tiles(4))
        assert canvas.getpixel(_center(3)) == TILE_COLORS[3]
        assert canvas.getpixel((190, 300)) == TILE_COLORS[3]
        assert canvas.getpixel(_center(4)) == BACKGROUND_COLOR

    def test_five_tiles_fill_both_rows(self):
        canvas = compose_grid(_tiles(5))
        for i in range(5):
            assert canvas.getpixel(_center(i)) == TILE_COLORS[i]
        # Gap between rows and the outer margins stay background
        assert canvas.getpixel((400, 270)) == BACKGROUND_COLOR
        assert canvas.getpixel((10, 10)) == BACKGROUND_COLOR
        assert canvas.getpixel((790, 490)) == BACKGROUND_COLOR

    def test_tiles_past_index_four_are_ignored(self):
        canvas = compose_grid(_tiles(6))
        # A sixth tile would land at row 1, col 2 (left=630, top=300)
        assert canvas.getpixel((730, 400)) == BACKGROUND_COLOR
        assert TILE_COLORS[5] not in {color for _, color in canvas.getcolors(maxcolors=16)}


class TestPlaceholder:
    def test_placeholder_is_solid_gray_200x200(self):
        tile = make_placeholder("ghost")
        assert tile.is_placeholder is True
        assert tile.owner_handle == "ghost"
        assert tile.image.size == (TILE_SIZE, TILE_SIZE)
        assert tile.image.mode == "RGB"
        assert tile.image.getcolors() == [(TILE_SIZE * TILE_SIZE, PLACEHOLDER_COLOR)]

    def test_placeholder_composes_like_a_fetched_tile(self):
        canvas = compose_grid([make_placeholder("ghost")] + _tiles(2)[1:])
        assert canvas.getpixel(_center(0)) == PLACEHOLDER_COLOR
        assert canvas.getpixel(_center(1)) == TILE_COLORS[1]


class TestEncodeImage:
    def test_png_roundtrip_keeps_dimensions(self):
        data = encode_image(compose_grid(_tiles(2)), "PNG")
        assert data.startswith(b"\x89PNG")
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.size == (CANVAS_WIDTH, CANVAS_HEIGHT)
