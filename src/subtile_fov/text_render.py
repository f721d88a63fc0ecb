"""Console rendering of an `FovEngine`: one character per subtile.

Each tile is drawn 2 characters wide and 2 lines tall:
- `@` the player's tile
- `.` visible floor subtile
- `#` visible wall subtile
- ` ` hidden subtile
"""
import io
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from .engine import FovEngine
from .log_config import configure_logging
from .settings import range_down, range_up
from .tilemap import Cell, GridMap, MapError

log = structlog.get_logger(__name__)

DEFAULT_MAP = Path(__file__).parent / "maps" / "demo.txt"
MAX_VISUAL_RANGE = 63

PLAYER_CHAR = "@"
FLOOR_CHAR = "."
WALL_CHAR = "#"
HIDDEN_CHAR = " "

CONTROLS = [
    "Controls:",
    "  [ ESC / Q ]: exit",
    "  [ W / A / S / D ]: move player",
    "  [ + / - ]: change visual range",
    "  (type a command, then Enter)",
    "",
    "Note: tiles are 2 characters wide and 2 lines tall",
    "",
]


def render_lines(engine: FovEngine) -> List[str]:
    """Map lines, two per tile row."""
    grid = engine.grid
    px, py = engine.player
    lines = []

    for sy in range(grid.ydims * 2):
        y = sy // 2
        chars = []
        for sx in range(grid.xdims * 2):
            x = sx // 2
            if (x, y) == (px, py):
                chars.append(PLAYER_CHAR)
            elif not engine.is_subtile_visible(sx, sy):
                chars.append(HIDDEN_CHAR)
            elif grid.get(x, y) == Cell.OPAQUE:
                chars.append(WALL_CHAR)
            else:
                chars.append(FLOOR_CHAR)
        lines.append("".join(chars))

    return lines


def render_text(engine: FovEngine, show_controls: bool = True) -> str:
    """Full console frame: optional controls header, visual range and map."""
    header = []
    if show_controls:
        header = [f"\t{line}" for line in CONTROLS]
        header.append(f"\tVisual range: {engine.visual_range}")
        header.append("")

    return "\n".join(header + render_lines(engine))


COMMANDS = {
    "w": (0, -1),
    "s": (0, 1),
    "a": (-1, 0),
    "d": (1, 0),
}
QUIT_COMMANDS = ("q", "esc")


def run_console(
    engine: FovEngine,
    read: Callable[[], str] = input,
    write: Callable[[str], None] = print,
):
    """Console loop: prints a frame, then applies one command per line read.

    Stops on a quit command or end of input.
    """
    write(render_text(engine))

    while True:
        try:
            command = read().strip().lower()
        except EOFError:
            break

        if command in QUIT_COMMANDS:
            break
        elif command in COMMANDS:
            if not engine.move_player(*COMMANDS[command]):
                continue
        elif command in ("+", "="):
            engine.visual_range = range_up(engine.visual_range, MAX_VISUAL_RANGE)
            engine.recompute()
        elif command == "-":
            engine.visual_range = range_down(engine.visual_range)
            engine.recompute()
        else:
            continue

        write(render_text(engine))


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(logging.WARNING)

    map_path = Path(argv[0]) if argv else DEFAULT_MAP
    radius = int(argv[1]) if len(argv) > 1 else 5

    try:
        grid = GridMap.from_file(map_path)
        start = grid.first_open_cell()
    except MapError as err:
        log.error("Can't start console view", error=str(err))
        return 1

    engine = FovEngine.from_grid(grid, visual_range=max(radius, 1))
    engine.set_player(*start)
    run_console(engine)
    return 0


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_render_lines():
    from .tilemap import GridMap

    engine = FovEngine.from_grid(GridMap.from_text("...\n.#.\n..."))
    engine.set_player(1, 0)
    lines = render_lines(engine)

    assert len(lines) == 6
    assert all(len(line) == 6 for line in lines)
    assert lines[0] == "..@@.."
    assert lines[1] == "..@@.."
    # Wall directly south: only its top face is seen, the tile behind it is hidden
    assert lines[2] == "..##.."
    assert lines[3] == "..  .."
    # The southern row falls in the wall's shadow
    assert lines[4] == "      "
    assert lines[5] == "      "


def test_render_text_header():
    engine = FovEngine(2, 1, visual_range=3)
    engine.set_player(0, 0)

    text = render_text(engine)
    assert "\tVisual range: 3" in text
    assert text.endswith("@@..\n@@..")
    assert render_text(engine, show_controls=False) == "@@..\n@@.."


def test_run_console_commands():
    from .tilemap import GridMap

    engine = FovEngine.from_grid(GridMap.from_text("....\n.#..\n...."), visual_range=2)
    engine.set_player(0, 0)
    frames = []
    commands = iter(["d", "s", "x", "-", "+", "q", "d"])

    run_console(engine, read=lambda: next(commands), write=frames.append)

    # Initial frame, one move, "s" into the wall is ignored, two range changes
    assert len(frames) == 4
    assert engine.player.as_tuple() == (1, 0)
    assert engine.visual_range == 2
    assert "\tVisual range: 1" in frames[2]
    assert frames[-1].endswith(render_text(engine, show_controls=False))


def test_run_console_end_of_input():
    engine = FovEngine(3, 3)
    engine.set_player(1, 1)
    frames = []

    def read():
        raise EOFError

    run_console(engine, read=read, write=frames.append)
    assert frames == [render_text(engine)]


def test_main_missing_map(tmp_path):
    assert main([str(tmp_path / "nope.txt")]) == 1
    structlog.reset_defaults()


def test_main_runs_console(tmp_path, monkeypatch, capsys):
    path = tmp_path / "room.txt"
    path.write_text("#####\n#...#\n#####\n")
    monkeypatch.setattr("sys.stdin", io.StringIO("q\n"))

    assert main([str(path), "3"]) == 0
    out = capsys.readouterr().out
    assert "\tVisual range: 3" in out
    assert "@@....#" in out
    structlog.reset_defaults()


#   ##    ##     ##     ########  ##    ##
#   ###  ###   ##  ##      ##     ####  ##
#   ## ## ##  ##    ##     ##     ## ## ##
#   ##    ##  ########     ##     ##  ####
#   ##    ##  ##    ##  ########  ##    ##

if __name__ == "__main__":
    sys.exit(main())
