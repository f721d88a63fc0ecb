"""FOV calculation benchmarks.

Key Ideas:
- Randomly generate X*Y maps with N opaque tiles.
- Each bench runs 10 `recompute()`s per map, from origins along the center row.
- Frame counts show how far each octant's recursion fans out.

Operational Complexity:
    where r = visual range, w = number of wall edges crossed inside the radius

Open map:           exactly 8 * r frames (one per depth and octant)
Cluttered map:      O(8 * r + w) frames; each wall edge can spawn one deeper frame
"""
import logging
import random
import time
from typing import Callable, List, Tuple

from .engine import FovEngine
from .helpers import Coords
from .log_config import configure_logging
from .tilemap import Cell

#    ######   ########  ########  ##    ##  #######
#   ##        ##           ##     ##    ##  ##    ##
#    ######   ######       ##     ##    ##  #######
#         ##  ##           ##     ##    ##  ##
#   #######   ########     ##      ######   ##


class BenchSettings:
    def __init__(
        self, seed: int, dims: Coords, maps: int, radius: int, pct_blocked: float
    ) -> None:
        self.seed = seed
        self.dims = dims
        self.maps = maps
        self.radius = radius
        self.pct_blocked = pct_blocked
        self.blocked_ct = int(dims.x * dims.y * pct_blocked)


class BenchResult:
    __slots__ = "seconds", "frames", "visible", "recomputes"

    def __init__(self) -> None:
        self.seconds = 0.0
        self.frames = 0
        self.visible = 0
        self.recomputes = 0

    def __repr__(self) -> str:
        return f"BenchResult {self.recomputes} FOVs, {self.frames} frames, {round(self.seconds, 3)}s"


def random_engine(bs: BenchSettings, rng: random.Random) -> FovEngine:
    """Engine with `bs.blocked_ct` randomly placed opaque tiles."""
    x, y = bs.dims.x - 1, bs.dims.y - 1
    engine = FovEngine(bs.dims.x, bs.dims.y, visual_range=bs.radius)

    for _ in range(bs.blocked_ct):
        engine.set(rng.randint(0, x), rng.randint(0, y), Cell.OPAQUE)

    return engine


def bench_timer(bs: BenchSettings) -> BenchResult:
    """General-use benchmark timer."""
    sx, sy = bs.dims.x // 2, bs.dims.y // 2
    rng = random.Random(bs.seed)
    result = BenchResult()

    origins = [(sx + dx, sy) for dx in range(-4, 6)]

    for _ in range(bs.maps):
        engine = random_engine(bs, rng)
        for ox, oy in origins:
            engine.set(ox, oy, Cell.OPEN)

        start = time.perf_counter()
        for ox, oy in origins:
            engine.set_player(ox, oy)
            result.frames += engine.frames
            result.recomputes += 1
        result.seconds += time.perf_counter() - start

        result.visible += len(engine.visible_tiles())

    return result


def run_benchmark(name: str, funcs: List[Tuple[str, Callable]], settings: BenchSettings):
    """Summarizes collection of benchmarks in (bench_name, bench_func) format.

    Notes:
    - there are 10 origins explored per map in `maps`
    - results are sorted by lowest time
    """
    s = settings
    print(f"--- {name} benchmarks ---")
    print(
        f"Dims = {s.dims.x}x{s.dims.y}, density = {s.pct_blocked}, maps = {s.maps}, radius = {s.radius}"
    )

    results = []

    for func_name, func in funcs:
        print(f"Benchmarking {func_name}...")
        results.append((func_name, func(settings)))

    print("...Done!  The results:\n")

    for bench_name, result in sorted(results, key=lambda r: r[1].seconds):
        fps = int(result.recomputes / result.seconds) if result.seconds else 0
        print(
            f"{bench_name:20} {round(result.seconds, 3):6} seconds {fps:5} FPS {result.frames:8} frames"
        )


def bench_open(bs: BenchSettings) -> BenchResult:
    """Bench with no opaque tiles."""
    return bench_timer(BenchSettings(bs.seed, bs.dims, bs.maps, bs.radius, 0.0))


def bench_cluttered(bs: BenchSettings) -> BenchResult:
    """Bench with `bs.pct_blocked` opaque tiles."""
    return bench_timer(bs)


def bench_dense(bs: BenchSettings) -> BenchResult:
    """Bench with three times `bs.pct_blocked` opaque tiles."""
    return bench_timer(BenchSettings(bs.seed, bs.dims, bs.maps, bs.radius, min(bs.pct_blocked * 3, 0.9)))


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_bench_open_frames():
    bs = BenchSettings(1, Coords(60, 60), 1, 10, 0.10)
    result = bench_open(bs)
    assert result.recomputes == 10
    assert result.frames == 10 * 8 * 10


def test_bench_stress_terminates():
    bs = BenchSettings(13, Coords(200, 200), 1, 50, 0.10)
    result = bench_cluttered(bs)
    assert result.recomputes == 10
    assert result.frames > 0
    assert result.visible > 0


#   ##    ##     ##     ########  ##    ##
#   ###  ###   ##  ##      ##     ####  ##
#   ## ## ##  ##    ##     ##     ## ## ##
#   ##    ##  ########     ##     ##  ####
#   ##    ##  ##    ##  ########  ##    ##

if __name__ == "__main__":
    # Keep rejected-move debug events out of the timings
    configure_logging(logging.WARNING)
    print(f"\n===== FOV Benchmarks =====\n")

    seed = 13
    dims = Coords(200, 200)
    maps = 10
    radius = 50
    density = 0.10

    bench_settings = BenchSettings(seed, dims, maps, radius, density)

    run_benchmark(
        f"Density {int(density * 100)}% Radius {radius}",
        [
            ("Open", bench_open),
            ("Cluttered", bench_cluttered),
            ("Dense", bench_dense),
        ],
        bench_settings,
    )
