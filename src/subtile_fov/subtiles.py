"""Subtile visibility buffer and the exposed-quadrant rules for opaque tiles.

Key Ideas:
- Every tile is split into 2x2 subtiles (quadrants), doubling FOV resolution.
- Tile (x, y) owns subtiles (2x, 2y), (2x, 2y+1), (2x+1, 2y), (2x+1, 2y+1).
- Open tiles are either fully visible or not at all.
- Opaque tiles only show the quadrants that face the observer and aren't
  covered by a neighboring wall (or the map edge).
"""
from typing import Iterable, List, Set, Tuple

from .helpers import Coords, Octant
from .tilemap import GridMap

# Quadrant offsets (dx, dy) inside a tile. Increasing y is "down".
TOP_LEFT = (0, 0)
BOTTOM_LEFT = (0, 1)
TOP_RIGHT = (1, 0)
BOTTOM_RIGHT = (1, 1)

QUADRANTS: Tuple[Tuple[int, int], ...] = (TOP_LEFT, BOTTOM_LEFT, TOP_RIGHT, BOTTOM_RIGHT)

# The quadrant pointing away from the observer is always hidden behind the tile
CORNER_EXCLUDED = {
    Octant.O1: TOP_LEFT,
    Octant.O2: TOP_RIGHT,
    Octant.O3: TOP_RIGHT,
    Octant.O4: BOTTOM_RIGHT,
    Octant.O5: BOTTOM_RIGHT,
    Octant.O6: BOTTOM_LEFT,
    Octant.O7: BOTTOM_LEFT,
    Octant.O8: TOP_LEFT,
}

# Back faces of a tile in the same column (octants 1,2 | 5,6) or row (3,4 | 7,8)
BACK_TOP = (TOP_LEFT, TOP_RIGHT)
BACK_BOTTOM = (BOTTOM_LEFT, BOTTOM_RIGHT)
BACK_RIGHT = (TOP_RIGHT, BOTTOM_RIGHT)
BACK_LEFT = (TOP_LEFT, BOTTOM_LEFT)

# Quadrants covered by a wall (or map edge) on the given side, by octant
RIGHT_WALL_EXCLUDED = {
    Octant.O1: TOP_RIGHT,
    Octant.O8: TOP_RIGHT,
    Octant.O6: BOTTOM_RIGHT,
    Octant.O7: BOTTOM_RIGHT,
}
LEFT_WALL_EXCLUDED = {
    Octant.O2: TOP_LEFT,
    Octant.O3: TOP_LEFT,
    Octant.O4: BOTTOM_LEFT,
    Octant.O5: BOTTOM_LEFT,
}
TOP_WALL_EXCLUDED = {
    Octant.O4: TOP_RIGHT,
    Octant.O5: TOP_RIGHT,
    Octant.O6: TOP_LEFT,
    Octant.O7: TOP_LEFT,
}
BOTTOM_WALL_EXCLUDED = {
    Octant.O1: BOTTOM_LEFT,
    Octant.O8: BOTTOM_LEFT,
    Octant.O2: BOTTOM_RIGHT,
    Octant.O3: BOTTOM_RIGHT,
}


def subtiles_of(x: int, y: int) -> List[Tuple[int, int]]:
    """Subtile coordinates of tile (x, y): top-left, bottom-left, top-right, bottom-right."""
    return [(2 * x + dx, 2 * y + dy) for dx, dy in QUADRANTS]


def exposed_quadrants(
    grid: GridMap, x: int, y: int, origin: Coords, octant: Octant
) -> List[Tuple[int, int]]:
    """Quadrants of opaque tile (x, y) visible from `origin` while scanning `octant`.

    Exclusions depend on the tile's actual neighbors, so this is evaluated for
    each opaque tile the scan reaches.
    """
    excluded: Set[Tuple[int, int]] = {CORNER_EXCLUDED[octant]}

    # In line with the observer: the whole back side is hidden
    if origin.x == x:
        if octant in (Octant.O1, Octant.O2):
            excluded.update(BACK_TOP)
        else:
            excluded.update(BACK_BOTTOM)
    elif origin.y == y:
        if octant in (Octant.O3, Octant.O4):
            excluded.update(BACK_RIGHT)
        else:
            excluded.update(BACK_LEFT)

    # Back corners hidden by adjacent walls
    if octant in RIGHT_WALL_EXCLUDED and grid.blocks_or_outside(x + 1, y):
        excluded.add(RIGHT_WALL_EXCLUDED[octant])
    if octant in LEFT_WALL_EXCLUDED and grid.blocks_or_outside(x - 1, y):
        excluded.add(LEFT_WALL_EXCLUDED[octant])
    if octant in TOP_WALL_EXCLUDED and grid.blocks_or_outside(x, y - 1):
        excluded.add(TOP_WALL_EXCLUDED[octant])
    if octant in BOTTOM_WALL_EXCLUDED and grid.blocks_or_outside(x, y + 1):
        excluded.add(BOTTOM_WALL_EXCLUDED[octant])

    return [q for q in QUADRANTS if q not in excluded]


class SubtileBuffer:
    """2D visibility of subtiles, (2 * xdims) x (2 * ydims).

    NOTE: direct access to SubtileBuffer.visible uses [sy][sx] order.
    """

    def __init__(self, xdims: int, ydims: int) -> None:
        self.xdims = xdims * 2
        self.ydims = ydims * 2
        self.visible: List[List[bool]] = [[False] * self.xdims for _ in range(self.ydims)]

    def clear(self):
        """Hides every subtile."""
        for row in self.visible:
            row[:] = [False] * self.xdims

    def show(self, sx: int, sy: int):
        self.visible[sy][sx] = True

    def show_tile(self, x: int, y: int):
        """Shows all 4 subtiles of tile (x, y)."""
        for sx, sy in subtiles_of(x, y):
            self.visible[sy][sx] = True

    def show_quadrants(self, x: int, y: int, quadrants: Iterable[Tuple[int, int]]):
        """Shows the given (dx, dy) quadrants of tile (x, y)."""
        for dx, dy in quadrants:
            self.visible[2 * y + dy][2 * x + dx] = True

    def is_visible(self, sx: int, sy: int) -> bool:
        return self.visible[sy][sx]

    def tile_visible(self, x: int, y: int) -> bool:
        """Returns `True` if at least one subtile of tile (x, y) is visible."""
        return any(self.visible[sy][sx] for sx, sy in subtiles_of(x, y))

    def quadrants_visible(self, x: int, y: int) -> List[Tuple[int, int]]:
        """Visible (dx, dy) quadrants of tile (x, y), in `QUADRANTS` order."""
        return [(dx, dy) for dx, dy in QUADRANTS if self.visible[2 * y + dy][2 * x + dx]]

    def visible_subtiles(self) -> Set[Tuple[int, int]]:
        return {
            (sx, sy)
            for sy, row in enumerate(self.visible)
            for sx, seen in enumerate(row)
            if seen
        }

    def visible_tiles(self) -> Set[Tuple[int, int]]:
        """Tiles with at least one visible subtile."""
        return {(sx // 2, sy // 2) for sx, sy in self.visible_subtiles()}

    def count(self) -> int:
        return sum(sum(row) for row in self.visible)

    def snapshot(self) -> Tuple[Tuple[bool, ...], ...]:
        """Immutable copy of the buffer, for comparisons."""
        return tuple(tuple(row) for row in self.visible)


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_subtiles_of():
    suite = [
        ((0, 0), [(0, 0), (0, 1), (1, 0), (1, 1)]),
        ((13, 7), [(26, 14), (26, 15), (27, 14), (27, 15)]),
        ((2, 1), [(4, 2), (4, 3), (5, 2), (5, 3)]),
    ]
    for xy, expected in suite:
        assert subtiles_of(*xy) == expected


def test_buffer_show_and_clear():
    buffer = SubtileBuffer(3, 2)
    assert (buffer.xdims, buffer.ydims) == (6, 4)
    assert buffer.count() == 0

    buffer.show_tile(2, 1)
    buffer.show_quadrants(0, 0, [BOTTOM_RIGHT])

    assert buffer.visible_subtiles() == {(4, 2), (4, 3), (5, 2), (5, 3), (1, 1)}
    assert buffer.visible_tiles() == {(2, 1), (0, 0)}
    assert buffer.tile_visible(0, 0)
    assert not buffer.tile_visible(1, 0)
    assert buffer.quadrants_visible(0, 0) == [BOTTOM_RIGHT]
    assert buffer.quadrants_visible(2, 1) == list(QUADRANTS)

    buffer.clear()
    assert buffer.count() == 0
    assert not buffer.is_visible(4, 2)


def test_exposed_quadrants_cardinal():
    """Walls directly in line with the observer only show their front face."""
    grid = GridMap(5, 5)
    origin = Coords(2, 2)
    suite = [
        ((2, 1), Octant.O1, [BOTTOM_LEFT, BOTTOM_RIGHT]),
        ((2, 1), Octant.O2, [BOTTOM_LEFT, BOTTOM_RIGHT]),
        ((3, 2), Octant.O3, [TOP_LEFT, BOTTOM_LEFT]),
        ((3, 2), Octant.O4, [TOP_LEFT, BOTTOM_LEFT]),
        ((2, 3), Octant.O5, [TOP_LEFT, TOP_RIGHT]),
        ((2, 3), Octant.O6, [TOP_LEFT, TOP_RIGHT]),
        ((1, 2), Octant.O7, [TOP_RIGHT, BOTTOM_RIGHT]),
        ((1, 2), Octant.O8, [TOP_RIGHT, BOTTOM_RIGHT]),
    ]
    for (x, y), octant, expected in suite:
        grid.set(x, y, 1)
        assert exposed_quadrants(grid, x, y, origin, octant) == expected, octant
        grid.set(x, y, 0)


def test_exposed_quadrants_corner():
    """A lone diagonal wall hides only its far corner."""
    grid = GridMap(5, 5)
    origin = Coords(2, 2)
    suite = [
        ((1, 0), Octant.O1, TOP_LEFT),
        ((3, 0), Octant.O2, TOP_RIGHT),
        ((4, 1), Octant.O3, TOP_RIGHT),
        ((4, 3), Octant.O4, BOTTOM_RIGHT),
        ((3, 4), Octant.O5, BOTTOM_RIGHT),
        ((1, 4), Octant.O6, BOTTOM_LEFT),
        ((0, 3), Octant.O7, BOTTOM_LEFT),
        ((0, 1), Octant.O8, TOP_LEFT),
    ]
    for (x, y), octant, hidden in suite:
        grid.set(x, y, 1)
        shown = exposed_quadrants(grid, x, y, origin, octant)
        grid.set(x, y, 0)
        # Map edges also hide quadrants: only check the interior-facing ones
        assert hidden not in shown, octant
        assert len(shown) >= 1


def test_exposed_quadrants_neighbors():
    """An adjacent wall hides the back corner it covers."""
    grid = GridMap(7, 7)
    origin = Coords(3, 3)
    suite = [
        # (wall, neighbor wall, octant, quadrant hidden only by the neighbor)
        ((2, 1), (3, 1), Octant.O1, TOP_RIGHT),
        ((2, 1), (2, 2), Octant.O1, BOTTOM_LEFT),
        ((4, 1), (3, 1), Octant.O2, TOP_LEFT),
        ((4, 1), (4, 2), Octant.O2, BOTTOM_RIGHT),
        ((5, 2), (4, 2), Octant.O3, TOP_LEFT),
        ((5, 2), (5, 3), Octant.O3, BOTTOM_RIGHT),
        ((5, 4), (4, 4), Octant.O4, BOTTOM_LEFT),
        ((5, 4), (5, 3), Octant.O4, TOP_RIGHT),
        ((4, 5), (3, 5), Octant.O5, BOTTOM_LEFT),
        ((4, 5), (4, 4), Octant.O5, TOP_RIGHT),
        ((2, 5), (3, 5), Octant.O6, BOTTOM_RIGHT),
        ((2, 5), (2, 4), Octant.O6, TOP_LEFT),
        ((1, 4), (2, 4), Octant.O7, BOTTOM_RIGHT),
        ((1, 4), (1, 3), Octant.O7, TOP_LEFT),
        ((1, 2), (2, 2), Octant.O8, TOP_RIGHT),
        ((1, 2), (1, 3), Octant.O8, BOTTOM_LEFT),
    ]
    for wall, neighbor, octant, hidden in suite:
        grid.set(*wall, 1)
        assert hidden in exposed_quadrants(grid, *wall, origin, octant), (octant, neighbor)
        grid.set(*neighbor, 1)
        assert hidden not in exposed_quadrants(grid, *wall, origin, octant), (octant, neighbor)
        grid.set(*wall, 0)
        grid.set(*neighbor, 0)


def test_exposed_quadrants_map_edge():
    """The map edge hides quadrants the same way a wall does."""
    grid = GridMap(3, 3)
    grid.set(0, 0, 1)
    origin = Coords(1, 1)

    assert exposed_quadrants(grid, 0, 0, origin, Octant.O1) == [BOTTOM_LEFT, TOP_RIGHT, BOTTOM_RIGHT]

    grid.set(1, 0, 1)
    assert exposed_quadrants(grid, 0, 0, origin, Octant.O1) == [BOTTOM_LEFT, BOTTOM_RIGHT]
    assert exposed_quadrants(grid, 0, 0, origin, Octant.O8) == [BOTTOM_LEFT, BOTTOM_RIGHT]


if __name__ == "__main__":
    print("-----  Subtiles -----\n")

    grid = GridMap(5, 5)
    grid.set(2, 1, 1)
    for octant in Octant:
        print(f"{octant.name}: {exposed_quadrants(grid, 2, 1, Coords(2, 2), octant)}")
