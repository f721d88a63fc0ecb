"""2D FOV - Recursive Shadowcasting at double (subtile) resolution.

Key Ideas:
- FOV is divided into 8 parts called octants (not to be confused with geometric term).
- Each octant is scanned outward one row (or column) at a time. A scan frame
  holds a [start, end] slope range known to be unobstructed.
- Entering a wall narrows the end slope of a deeper frame (shadow boundary);
  leaving a wall tightens the start slope of the current frame.
- Open tiles show all 4 subtiles. Opaque tiles show only their exposed quadrants.
- Visibility is circular: tiles must be within `radius * radius` squared distance.

Slopes are stored sign-adjusted (see `OctantRules`), so all 8 octants share
one scan routine and every comparison is `>=`.
"""
from .helpers import OCTANT_RULES, Coords, Octant, clamp, squared_distance
from .subtiles import SubtileBuffer, exposed_quadrants
from .tilemap import Cell, GridMap


#   ########    ####    ##    ##
#   ##        ##    ##  ##    ##
#   ######    ##    ##  ##    ##
#   ##        ##    ##   ##  ##
#   ##         ######      ##


def fov_calc(grid: GridMap, buffer: SubtileBuffer, origin: Coords, radius: int) -> int:
    """Fills `buffer` with the subtiles visible from `origin`.

    The buffer is cleared first; the observer's own tile is always visible.
    Returns the number of scan frames used.
    """
    buffer.clear()
    buffer.show_tile(origin.x, origin.y)

    frames = 0
    for octant in Octant:
        frames += scan_octant(grid, buffer, origin, radius, octant, 1, 1.0, 0.0)

    return frames


def scan_octant(
    grid: GridMap,
    buffer: SubtileBuffer,
    origin: Coords,
    radius: int,
    octant: Octant,
    depth: int,
    start_slope: float,
    end_slope: float,
) -> int:
    """Scans one row/column of `octant` at `depth`, recursing outward.

    ### Parameters

    `depth`: int
        Distance from the observer along the octant's primary axis (1+).
    `start_slope`, `end_slope`: float
        Sign-adjusted slope range of this frame. The sweep starts at the outer
        edge (`start_slope`) and runs toward the centerline while the tile's
        slope is `>= end_slope`.

    Returns the number of frames scanned (this one and all deeper ones).
    """
    rules = OCTANT_RULES[octant]
    ox, oy = origin
    o_pri, o_sec = rules.origin_pri_sec(ox, oy)
    pri_dims, sec_dims = rules.origin_pri_sec(grid.xdims, grid.ydims)
    step = rules.step

    pri = o_pri + rules.pri_dir * depth
    if pri < 0 or pri >= pri_dims:
        return 0

    frames = 1
    abs_radius = radius * radius
    tiles = grid.tiles

    sec = clamp(o_sec - step * round(start_slope * depth), sec_dims)
    x, y = rules.to_xy(pri, sec)

    while rules.slope_to(x, y, ox, oy) >= end_slope:
        if squared_distance(x, y, ox, oy) <= abs_radius:
            # Previously swept tile: one step back, away from the centerline
            px, py = rules.to_xy(pri, sec - step)

            if tiles[y][x] == Cell.OPAQUE:
                buffer.show_quadrants(x, y, exposed_quadrants(grid, x, y, origin, octant))

                if grid.is_open(px, py):
                    # Light passed the previous tile: shadow begins at this wall
                    shadow = rules.slope_to(*rules.shadow_corner(x, y), ox, oy)
                    frames += scan_octant(
                        grid, buffer, origin, radius, octant, depth + 1, start_slope, shadow
                    )
            else:
                if grid.is_opaque(px, py):
                    # Leaving a wall: deeper frames start past its far corner
                    start_slope = rules.slope_to(*rules.light_corner(x, y), ox, oy)

                buffer.show_tile(x, y)

        sec += step
        x, y = rules.to_xy(pri, sec)

    # Last tile evaluated by the sweep
    sec = clamp(sec - step, sec_dims)
    x, y = rules.to_xy(pri, sec)

    if depth < radius and tiles[y][x] == Cell.OPEN:
        frames += scan_octant(
            grid, buffer, origin, radius, octant, depth + 1, start_slope, end_slope
        )

    return frames


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def _fov(text: str, ox: int, oy: int, radius: int):
    grid = GridMap.from_text(text)
    buffer = SubtileBuffer(grid.xdims, grid.ydims)
    frames = fov_calc(grid, buffer, Coords(ox, oy), radius)
    return grid, buffer, frames


def test_origin_always_visible():
    suite = [
        ("...\n...\n...", 1, 1, 1),
        ("###\n#.#\n###", 1, 1, 5),
        (".", 0, 0, 3),
    ]
    for text, ox, oy, radius in suite:
        _grid, buffer, _frames = _fov(text, ox, oy, radius)
        assert buffer.quadrants_visible(ox, oy) == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_single_tile_map():
    _grid, buffer, frames = _fov(".", 0, 0, 5)
    assert buffer.visible_tiles() == {(0, 0)}
    assert frames == 0


def test_wall_casts_shadow():
    """Classic regression: a wall north of the observer shadows the tile behind it."""
    # (wall, shadowed, lit corners) for a wall on each side of the observer at (2, 2)
    suite = [
        ((2, 1), (2, 0), [(0, 0), (4, 0)]),
        ((3, 2), (4, 2), [(4, 0), (4, 4)]),
        ((2, 3), (2, 4), [(0, 4), (4, 4)]),
        ((1, 2), (0, 2), [(0, 0), (0, 4)]),
    ]
    for wall, shadowed, lit in suite:
        grid = GridMap(5, 5)
        grid.set(*wall, Cell.OPAQUE)
        buffer = SubtileBuffer(5, 5)
        fov_calc(grid, buffer, Coords(2, 2), 5)

        assert buffer.quadrants_visible(*shadowed) == [], wall
        for corner in lit:
            assert buffer.tile_visible(*corner), (wall, corner)
        assert len(buffer.quadrants_visible(*wall)) == 2, wall


def test_wall_shows_front_face():
    suite = [
        ((2, 1), [(0, 1), (1, 1)]),
        ((3, 2), [(0, 0), (0, 1)]),
        ((2, 3), [(0, 0), (1, 0)]),
        ((1, 2), [(1, 0), (1, 1)]),
    ]
    for wall, expected in suite:
        grid = GridMap(5, 5)
        grid.set(*wall, Cell.OPAQUE)
        buffer = SubtileBuffer(5, 5)
        fov_calc(grid, buffer, Coords(2, 2), 5)

        assert buffer.quadrants_visible(*wall) == expected, wall


def test_open_map_is_circular():
    grid = GridMap(21, 21)
    buffer = SubtileBuffer(21, 21)
    for radius in (1, 2, 5, 7, 10):
        fov_calc(grid, buffer, Coords(10, 10), radius)
        expected = {
            (x, y)
            for x in range(21)
            for y in range(21)
            if squared_distance(x, y, 10, 10) <= radius * radius
        }
        assert buffer.visible_tiles() == expected, radius
        assert buffer.count() == 4 * len(expected)


def test_open_map_frame_count():
    """One frame per depth and octant when nothing blocks sight."""
    grid = GridMap(41, 41)
    buffer = SubtileBuffer(41, 41)
    for radius in (1, 4, 20):
        assert fov_calc(grid, buffer, Coords(20, 20), radius) == 8 * radius


def test_map_edge_clips_scan():
    _grid, buffer, _frames = _fov("...\n...\n...", 0, 0, 10)
    assert buffer.visible_tiles() == {(x, y) for x in range(3) for y in range(3)}


def test_closed_room():
    text = "#####\n#...#\n#...#\n#...#\n#####"
    grid, buffer, _frames = _fov(text, 2, 2, 10)

    # Every tile of a convex room is seen, walls only from the inside
    assert buffer.visible_tiles() == {(x, y) for x in range(5) for y in range(5)}
    assert buffer.quadrants_visible(2, 0) == [(0, 1), (1, 1)]
    assert buffer.quadrants_visible(0, 2) == [(1, 0), (1, 1)]
    assert buffer.quadrants_visible(4, 2) == [(0, 0), (0, 1)]
    assert buffer.quadrants_visible(2, 4) == [(0, 0), (1, 0)]
    # Room corners only show the quadrant facing the observer
    assert buffer.quadrants_visible(0, 0) == [(1, 1)]
    assert buffer.quadrants_visible(4, 4) == [(0, 0)]
    assert grid.opaque_count() == 16


def test_visible_within_radius():
    import random

    rng = random.Random(7)
    grid = GridMap(40, 30)
    for _ in range(240):
        grid.set(rng.randrange(40), rng.randrange(30), Cell.OPAQUE)
    grid.set(20, 15, Cell.OPEN)
    buffer = SubtileBuffer(40, 30)

    for radius in (1, 3, 8, 15):
        fov_calc(grid, buffer, Coords(20, 15), radius)
        for x, y in buffer.visible_tiles():
            assert squared_distance(x, y, 20, 15) <= radius * radius


def test_walls_never_show_back_corner():
    import random

    rng = random.Random(11)
    grid = GridMap(30, 30)
    for _ in range(150):
        grid.set(rng.randrange(30), rng.randrange(30), Cell.OPAQUE)
    grid.set(15, 15, Cell.OPEN)
    buffer = SubtileBuffer(30, 30)
    fov_calc(grid, buffer, Coords(15, 15), 12)

    for x, y in buffer.visible_tiles():
        if grid.get(x, y) == Cell.OPAQUE:
            quadrants = buffer.quadrants_visible(x, y)
            assert 1 <= len(quadrants) < 4
            # The quadrant pointing straight away from the observer stays hidden
            far = (1 if x > 15 else 0, 1 if y > 15 else 0)
            if x != 15 and y != 15:
                assert far not in quadrants, (x, y)


if __name__ == "__main__":
    print("\n=====  Recursive Shadowcasting FOV Testing  =====\n")

    text = "\n".join([
        "...............",
        "...#...........",
        ".......##......",
        "...............",
        ".#.....@....#..",
        "...............",
        "....###........",
        "...............",
    ])
    grid = GridMap.from_text(text.replace("@", "."))
    buffer = SubtileBuffer(grid.xdims, grid.ydims)
    frames = fov_calc(grid, buffer, Coords(7, 4), 6)
    print(f"{frames} frames, {buffer.count()} subtiles visible\n")

    for sy, row in enumerate(buffer.visible):
        line = ""
        for sx, seen in enumerate(row):
            wall = grid.get(sx // 2, sy // 2) == Cell.OPAQUE
            line += (" " if not seen else "#" if wall else ".")
        print(line)
