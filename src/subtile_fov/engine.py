"""FOV engine: owns the map, subtile buffer, player position and visual range.

The engine is passive: callers move the player (which recomputes FOV) and
then query subtile visibility. Changing `visual_range` doesn't recompute;
call `recompute()` or `set_player()` afterwards.

Recomputes are timed (`frames`, `duration_ms`) but not logged; applications
call `log_config.configure_logging` to filter the debug events that remain.

Not thread-safe: one engine instance per thread of control.
"""
import time
from typing import Callable, List, Optional, Set, Tuple

import structlog

from .fov_recurse import fov_calc
from .helpers import Coords
from .subtiles import SubtileBuffer, subtiles_of
from .tilemap import Cell, GridMap

log = structlog.get_logger(__name__)

DEFAULT_VISUAL_RANGE = 5

MoveListener = Callable[["FovEngine"], None]


class FovEngine:
    """Field of view of a single player on a `GridMap`, at subtile resolution.

    ### Parameters

    `xdims`, `ydims`: int
        Map dimensions, in tiles. All tiles start open unless `grid` is given.
    `visual_range`: int
        Radius of the player's circle of vision, in tiles (1+).
    `grid`: GridMap, optional
        Already populated map of the same dimensions.
    """

    def __init__(
        self,
        xdims: int,
        ydims: int,
        visual_range: int = DEFAULT_VISUAL_RANGE,
        grid: Optional[GridMap] = None,
    ) -> None:
        if grid is not None and (grid.xdims, grid.ydims) != (xdims, ydims):
            raise ValueError(f"grid is {grid.xdims}x{grid.ydims}, expected {xdims}x{ydims}!")
        self.grid = grid if grid is not None else GridMap(xdims, ydims)
        self.buffer = SubtileBuffer(xdims, ydims)
        self.player = Coords(0, 0)
        self.visual_range = visual_range
        self.frames = 0
        self.duration_ms = 0.0
        self._listeners: List[MoveListener] = []

    def __repr__(self) -> str:
        return f"FovEngine {self.grid.xdims}x{self.grid.ydims} player: {self.player} range: {self.visual_range}"

    @staticmethod
    def from_grid(grid: GridMap, visual_range: int = DEFAULT_VISUAL_RANGE) -> "FovEngine":
        """Engine using an already populated map."""
        return FovEngine(grid.xdims, grid.ydims, visual_range, grid=grid)

    @property
    def visual_range(self) -> int:
        return self._visual_range

    @visual_range.setter
    def visual_range(self, value: int):
        if value < 1:
            raise ValueError("visual range must be > 0!")
        self._visual_range = value

    # --- Map --- #

    def valid(self, x: int, y: int) -> bool:
        return self.grid.valid(x, y)

    def get(self, x: int, y: int) -> Cell:
        return self.grid.get(x, y)

    def set(self, x: int, y: int, state: int):
        """Sets a map tile. Out of bounds writes are ignored."""
        self.grid.set(x, y, state)

    # --- Player --- #

    def subscribe(self, listener: MoveListener):
        """Registers `listener(engine)`, called after every successful move."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: MoveListener):
        self._listeners.remove(listener)

    def move_player(self, dx: int, dy: int) -> bool:
        """Moves the player by (dx, dy). See `set_player`."""
        return self.set_player(self.player.x + dx, self.player.y + dy)

    def set_player(self, x: int, y: int) -> bool:
        """Moves the player to (x, y) if it is in bounds and open.

        On success the FOV is recomputed, listeners are notified and `True` is
        returned. Otherwise nothing changes and `False` is returned.
        """
        if not self.grid.is_open(x, y):
            log.debug("Move rejected", src=self.player.as_tuple(), dst=(x, y))
            return False

        self.player = Coords(x, y)
        self.recompute()

        for listener in list(self._listeners):
            listener(self)

        return True

    # --- FOV --- #

    def recompute(self):
        """Recalculates visible subtiles from the player's current position."""
        start = time.perf_counter()
        self.frames = fov_calc(self.grid, self.buffer, self.player, self._visual_range)
        self.duration_ms = (time.perf_counter() - start) * 1000

    def is_subtile_visible(self, sx: int, sy: int) -> bool:
        """Visibility of subtile (sx, sy). Tile (x, y) owns subtiles (2x..2x+1, 2y..2y+1)."""
        return self.buffer.is_visible(sx, sy)

    def subtiles_of_tile(self, x: int, y: int) -> List[Tuple[int, int]]:
        """Subtiles of tile (x, y): top-left, bottom-left, top-right, bottom-right."""
        return subtiles_of(x, y)

    def is_tile_visible(self, x: int, y: int) -> bool:
        """Returns `True` if any subtile of tile (x, y) is visible."""
        return self.buffer.tile_visible(x, y)

    def visible_tiles(self) -> Set[Tuple[int, int]]:
        return self.buffer.visible_tiles()

    def snapshot(self) -> Tuple[Tuple[bool, ...], ...]:
        return self.buffer.snapshot()


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def _rotate(dx: int, dy: int, turns: int) -> Tuple[int, int]:
    for _ in range(turns):
        dx, dy = -dy, dx
    return dx, dy


def test_defaults():
    engine = FovEngine(10, 8)
    assert engine.visual_range == 5
    assert engine.player == Coords(0, 0)
    assert engine.buffer.count() == 0
    assert (engine.buffer.xdims, engine.buffer.ydims) == (20, 16)


def test_bad_visual_range():
    import pytest

    engine = FovEngine(5, 5)
    with pytest.raises(ValueError):
        engine.visual_range = 0
    with pytest.raises(ValueError):
        FovEngine(5, 5, visual_range=-2)


def test_self_visibility():
    engine = FovEngine.from_grid(GridMap.from_text("###\n#.#\n###"))
    assert engine.set_player(1, 1)
    for sx, sy in engine.subtiles_of_tile(1, 1):
        assert engine.is_subtile_visible(sx, sy)


def test_subtiles_of_tile():
    engine = FovEngine(20, 10)
    assert engine.subtiles_of_tile(13, 7) == [(26, 14), (26, 15), (27, 14), (27, 15)]


def test_set_player_and_notify():
    engine = FovEngine(5, 5)
    moves = []
    engine.subscribe(lambda e: moves.append(e.player.as_tuple()))

    assert engine.set_player(2, 2)
    assert engine.move_player(1, 0)
    assert moves == [(2, 2), (3, 2)]
    assert engine.player == Coords(3, 2)
    assert engine.is_tile_visible(3, 2)


def test_unsubscribe():
    engine = FovEngine(5, 5)
    moves = []
    listener = lambda e: moves.append(e.player.as_tuple())
    engine.subscribe(listener)
    engine.set_player(1, 1)
    engine.unsubscribe(listener)
    engine.set_player(2, 2)
    assert moves == [(1, 1)]


def test_move_rejection():
    engine = FovEngine(5, 5)
    engine.set(2, 1, Cell.OPAQUE)
    engine.set_player(2, 2)
    moves = []
    engine.subscribe(lambda e: moves.append(e.player.as_tuple()))
    before = engine.snapshot()

    suite = [(0, -1), (-3, 0), (0, 3), (3, 0)]
    for dx, dy in suite:
        assert not engine.move_player(dx, dy)
        assert engine.player == Coords(2, 2)
        assert engine.snapshot() == before

    assert not engine.set_player(5, 5)
    assert not engine.set_player(-1, 0)
    assert moves == []


def test_visual_range_change_does_not_recompute():
    engine = FovEngine(21, 21, visual_range=3)
    engine.set_player(10, 10)
    before = engine.snapshot()

    engine.visual_range = 8
    assert engine.snapshot() == before

    engine.recompute()
    assert engine.snapshot() != before


def test_idempotence():
    engine = FovEngine.from_grid(
        GridMap.from_text("\n".join([
            "..........",
            "..#....#..",
            "....##....",
            "..........",
            ".#.......#",
            "......#...",
        ])),
        visual_range=7,
    )
    engine.set_player(4, 3)
    first = engine.snapshot()
    engine.recompute()
    assert engine.snapshot() == first


def test_symmetry_on_open_map():
    engine = FovEngine(31, 31)
    for radius in (1, 3, 6, 11):
        engine.visual_range = radius
        engine.set_player(15, 15)
        relative = {(x - 15, y - 15) for x, y in engine.visible_tiles()}
        for turns in (1, 2, 3):
            assert {_rotate(dx, dy, turns) for dx, dy in relative} == relative, (radius, turns)


def test_monotonic_radius_on_open_map():
    engine = FovEngine(31, 31, visual_range=1)
    engine.set_player(12, 17)
    previous = engine.buffer.visible_subtiles()
    for radius in range(2, 15):
        engine.visual_range = radius
        engine.recompute()
        current = engine.buffer.visible_subtiles()
        assert previous <= current, radius
        previous = current


def test_bounded_termination():
    import random

    rng = random.Random(13)
    engine = FovEngine(200, 200, visual_range=50)
    for _ in range(4000):
        engine.set(rng.randrange(200), rng.randrange(200), Cell.OPAQUE)
    engine.set(100, 100, Cell.OPEN)

    assert engine.set_player(100, 100)
    assert engine.frames > 0
    for x, y in engine.visible_tiles():
        assert max(abs(x - 100), abs(y - 100)) <= 50

    # Nothing blocks sight: exactly one frame per depth and octant
    open_engine = FovEngine(200, 200, visual_range=50)
    open_engine.set_player(100, 100)
    assert open_engine.frames == 8 * 50


def test_monotonic_radius_on_cluttered_maps():
    import random

    rng = random.Random(7)
    for _ in range(20):
        grid = GridMap(25, 25)
        for _ in range(120):
            grid.set(rng.randrange(25), rng.randrange(25), Cell.OPAQUE)
        grid.set(12, 12, Cell.OPEN)

        engine = FovEngine.from_grid(grid, visual_range=1)
        engine.set_player(12, 12)
        previous = engine.buffer.visible_subtiles()
        for radius in range(2, 14):
            engine.visual_range = radius
            engine.recompute()
            current = engine.buffer.visible_subtiles()
            assert previous <= current, radius
            previous = current


def test_from_grid_keeps_map():
    import pytest

    grid = GridMap.from_text("..#\n...")
    engine = FovEngine.from_grid(grid, visual_range=2)
    assert engine.grid is grid
    assert (engine.buffer.xdims, engine.buffer.ydims) == (6, 4)

    with pytest.raises(ValueError):
        FovEngine(4, 2, grid=grid)


def test_recompute_is_silent_by_default(capsys):
    structlog.reset_defaults()
    engine = FovEngine(9, 9)
    assert engine.set_player(4, 4)
    engine.recompute()
    assert engine.frames > 0
    assert engine.duration_ms >= 0.0
    assert capsys.readouterr().out == ""


if __name__ == "__main__":
    print("\n=====  FOV Engine  =====\n")

    engine = FovEngine.from_grid(GridMap.from_text("#######\n#.....#\n#..#..#\n#.....#\n#######"))
    engine.subscribe(lambda e: print(f"moved: {e}"))
    engine.set_player(3, 3)
    engine.move_player(-1, 0)
    print(f"visible tiles: {len(engine.visible_tiles())}")
