"""Tilemap of open and opaque tiles for Subtile FOV.

Plain-text map format (one line per row):
- `#` is an opaque tile (wall)
- any other character is an open tile (floor)
"""
from enum import IntEnum
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import structlog

from .helpers import Coords

log = structlog.get_logger(__name__)

WALL_CHAR = "#"
FLOOR_CHAR = "."


class MapError(ValueError):
    """Raised when map data can't be turned into a `GridMap`."""


class Cell(IntEnum):
    """State of a single tile."""

    OPEN = 0
    OPAQUE = 1


class GridMap:
    """Fixed-size 2D tilemap of `Cell` states.

    NOTE: direct access to GridMap.tiles uses [y][x] order. Use `get(x,y)` instead.
    """

    def __init__(self, xdims: int, ydims: int) -> None:
        if xdims < 1 or ydims < 1:
            raise ValueError("all map dimensions must be > 0!")

        self.xdims = xdims
        self.ydims = ydims
        self.tiles: List[List[Cell]] = [[Cell.OPEN] * xdims for _ in range(ydims)]

    def __repr__(self) -> str:
        return f"GridMap {self.xdims}x{self.ydims}"

    def valid(self, x: int, y: int) -> bool:
        """Returns `True` if (x, y) is within the map's bounds."""
        return -1 < x < self.xdims and -1 < y < self.ydims

    def get(self, x: int, y: int) -> Cell:
        """Gets the Cell at given location. (x, y) must be `valid`."""
        return self.tiles[y][x]

    def set(self, x: int, y: int, state: int) -> None:
        """Sets the Cell at given location. Out of bounds writes are ignored."""
        if self.valid(x, y):
            self.tiles[y][x] = Cell(state)

    def is_open(self, x: int, y: int) -> bool:
        """Returns `True` if (x, y) is in bounds and open."""
        return self.valid(x, y) and self.tiles[y][x] == Cell.OPEN

    def is_opaque(self, x: int, y: int) -> bool:
        """Returns `True` if (x, y) is in bounds and opaque."""
        return self.valid(x, y) and self.tiles[y][x] == Cell.OPAQUE

    def blocks_or_outside(self, x: int, y: int) -> bool:
        """Returns `True` if (x, y) is opaque or outside the map."""
        return not self.valid(x, y) or self.tiles[y][x] == Cell.OPAQUE

    def first_open_cell(self) -> Coords:
        """First open tile, scanning columns left to right, each top to bottom."""
        for x in range(self.xdims):
            for y in range(self.ydims):
                if self.tiles[y][x] == Cell.OPEN:
                    return Coords(x, y)

        raise MapError("No open tiles found in map")

    def opaque_count(self) -> int:
        return sum(row.count(Cell.OPAQUE) for row in self.tiles)

    def to_text(self) -> str:
        """Map in plain-text format, using `#` for walls and `.` for floors."""
        return "\n".join(
            "".join(WALL_CHAR if cell == Cell.OPAQUE else FLOOR_CHAR for cell in row)
            for row in self.tiles
        )

    def show(self):
        print(self.to_text())

    @staticmethod
    def from_rows(rows: Sequence[Sequence[bool]]) -> "GridMap":
        """Builds a map from a rectangular [y][x] grid where `True` is passable."""
        if not rows or not rows[0]:
            raise MapError("Empty map data")

        xdims, ydims = len(rows[0]), len(rows)
        for y, row in enumerate(rows):
            if len(row) != xdims:
                raise MapError(f"Row {y} has {len(row)} tiles, expected {xdims}")

        grid = GridMap(xdims, ydims)
        for y, row in enumerate(rows):
            for x, passable in enumerate(row):
                grid.set(x, y, Cell.OPEN if passable else Cell.OPAQUE)

        return grid

    @staticmethod
    def from_text(text: str) -> "GridMap":
        """Builds a map from plain-text map data. See module docs for format."""
        lines = text.splitlines()
        # Trailing blank lines are not rows
        while lines and not lines[-1]:
            lines.pop()

        if not lines:
            log.error("Empty map text")
            raise MapError("Empty map data")

        grid = GridMap.from_rows(text_to_rows(lines))
        log.info(
            "Map loaded",
            xdims=grid.xdims,
            ydims=grid.ydims,
            opaque=grid.opaque_count(),
        )
        return grid

    @staticmethod
    def from_file(path: str | Path) -> "GridMap":
        """Builds a map from a plain-text map file."""
        path = Path(path)
        if not path.is_file():
            log.error("Missing map file", path=str(path))
            raise MapError(f"Missing map file: {path}")

        try:
            return GridMap.from_text(path.read_text())
        except MapError as err:
            raise MapError(f"{path}: {err}") from err


def text_to_rows(lines: Iterable[str]) -> List[List[bool]]:
    """Converts lines of map text into [y][x] rows where `True` is passable."""
    return [[char != WALL_CHAR for char in line] for line in lines]


def wall_coords(grid: GridMap) -> List[Tuple[int, int]]:
    """All opaque (x, y) coordinates, in row order."""
    return [
        (x, y)
        for y, row in enumerate(grid.tiles)
        for x, cell in enumerate(row)
        if cell == Cell.OPAQUE
    ]


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_valid():
    grid = GridMap(10, 10)
    suite = [
        (-1,5), (5,-1), (10,5), (5,10), (20,0),
        (0,0), (1,0), (0,1), (9,1), (1,9)
    ]
    results = [
        False, False, False, False, False,
        True, True, True, True, True
    ]
    for xy, expected in zip(suite, results):
        assert grid.valid(*xy) == expected


def test_set_and_get():
    grid = GridMap(4, 3)
    grid.set(3, 2, Cell.OPAQUE)
    grid.set(0, 1, 1)

    assert grid.get(3, 2) == Cell.OPAQUE
    assert grid.get(0, 1) == Cell.OPAQUE
    assert grid.get(2, 2) == Cell.OPEN
    assert grid.opaque_count() == 2


def test_set_out_of_bounds_is_ignored():
    grid = GridMap(3, 3)
    for x, y in [(-1, 0), (0, -1), (3, 0), (0, 3), (99, 99)]:
        grid.set(x, y, Cell.OPAQUE)

    assert grid.opaque_count() == 0


def test_bad_dimensions():
    import pytest

    for xdims, ydims in [(0, 5), (5, 0), (-1, 3)]:
        with pytest.raises(ValueError):
            GridMap(xdims, ydims)


def test_neighbors():
    grid = GridMap.from_text("#..\n...\n")
    assert grid.is_opaque(0, 0)
    assert not grid.is_open(0, 0)
    assert grid.is_open(1, 0)
    assert not grid.is_open(-1, 0)
    assert not grid.is_opaque(3, 0)
    assert grid.blocks_or_outside(0, 0)
    assert grid.blocks_or_outside(-1, 1)
    assert grid.blocks_or_outside(1, 2)
    assert not grid.blocks_or_outside(1, 1)


def test_from_text():
    text = "#####\n#..x#\n#####\n"
    grid = GridMap.from_text(text)

    assert (grid.xdims, grid.ydims) == (5, 3)
    assert grid.get(0, 0) == Cell.OPAQUE
    assert grid.get(1, 1) == Cell.OPEN
    assert grid.get(3, 1) == Cell.OPEN
    assert grid.to_text() == "#####\n#...#\n#####"
    assert wall_coords(grid)[:3] == [(0, 0), (1, 0), (2, 0)]


def test_from_text_malformed():
    import pytest

    for text in ["", "\n\n", "###\n##\n"]:
        with pytest.raises(MapError):
            GridMap.from_text(text)


def test_from_rows():
    grid = GridMap.from_rows([[True, False], [True, True], [False, True]])
    assert (grid.xdims, grid.ydims) == (2, 3)
    assert wall_coords(grid) == [(1, 0), (0, 2)]


def test_from_file(tmp_path):
    import pytest

    path = tmp_path / "map.txt"
    path.write_text("###\n#.#\n###\n")
    grid = GridMap.from_file(path)
    assert grid.first_open_cell() == Coords(1, 1)

    with pytest.raises(MapError):
        GridMap.from_file(tmp_path / "missing.txt")

    empty = tmp_path / "empty.txt"
    empty.write_text("")
    with pytest.raises(MapError):
        GridMap.from_file(empty)


def test_first_open_cell():
    import pytest

    # Columns are scanned before rows
    grid = GridMap.from_text("##.\n#..\n")
    assert grid.first_open_cell() == Coords(1, 1)

    with pytest.raises(MapError):
        GridMap.from_text("##\n##\n").first_open_cell()


if __name__ == "__main__":
    print("-----  Tilemap -----\n")

    grid = GridMap.from_text("#####\n#...#\n#.#.#\n#...#\n#####\n")
    grid.show()
    print(f"\nfirst open: {grid.first_open_cell()}, walls: {grid.opaque_count()}")
