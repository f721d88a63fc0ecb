"""2D FOV Visualization - Recursive Shadowcasting at subtile resolution.

Controls:
- W/A/S/D or arrow keys: move the player
- +/-: change the visual range (minimum 1)
- Q/Esc: quit

Usage: `subtile-fov-demo [map.txt] [visual_range]`
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pygame, pygame.freetype
import structlog
from pygame.freetype import Font

from .engine import FovEngine
from .helpers import Coords
from .log_config import configure_logging
from .map_drawing import draw_hud, draw_map, draw_player
from .settings import Settings, range_down, range_up
from .tilemap import GridMap, MapError

log = structlog.get_logger(__name__)

DEFAULT_MAP = Path(__file__).parent / "maps" / "demo.txt"

MOVE_KEYS = {
    pygame.K_w: (0, -1),
    pygame.K_UP: (0, -1),
    pygame.K_s: (0, 1),
    pygame.K_DOWN: (0, 1),
    pygame.K_a: (-1, 0),
    pygame.K_LEFT: (-1, 0),
    pygame.K_d: (1, 0),
    pygame.K_RIGHT: (1, 0),
}
RANGE_UP_KEYS = (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS)
RANGE_DOWN_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)
QUIT_KEYS = (pygame.K_q, pygame.K_ESCAPE)


#    ######      ##     ##    ##  ########
#   ##         ##  ##   ###  ###  ##
#   ##   ###  ##    ##  ## ## ##  ######
#   ##    ##  ########  ##    ##  ##
#    ######   ##    ##  ##    ##  ########


def run_game(engine: FovEngine, settings: Settings):
    """Renders the FOV display using Pygame."""
    # --- Pygame setup --- #
    pygame.init()
    pygame.display.set_caption("2D Subtile Shadowcasting FOV")
    screen = pygame.display.set_mode((settings.width, settings.height))
    pygame.key.set_repeat(200, 60)
    clock = pygame.time.Clock()
    font = Font(None, size=settings.font_size)
    running = True

    # Redraw whenever the engine reports a successful move
    redraw = True

    def on_move(_engine: FovEngine):
        nonlocal redraw
        redraw = True

    engine.subscribe(on_move)

    # --- Game Loop --- #
    while running:
        # --- Event Polling --- #
        # pygame.QUIT: Alt+F4 or Pressing 'X' in window corner
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            if event.type == pygame.KEYDOWN:
                key = event.dict["key"]
                if key in QUIT_KEYS:
                    running = False
                elif key in MOVE_KEYS:
                    engine.move_player(*MOVE_KEYS[key])
                elif key in RANGE_UP_KEYS or key in RANGE_DOWN_KEYS:
                    if key in RANGE_UP_KEYS:
                        radius = range_up(engine.visual_range, settings.max_radius)
                    else:
                        radius = range_down(engine.visual_range)
                    if radius != engine.visual_range:
                        engine.visual_range = radius
                        # Range changes don't recompute on their own
                        engine.set_player(*engine.player)

        # --- Rendering --- #
        if redraw:
            screen.fill(settings.background_color)
            draw_map(screen, engine, settings)
            draw_player(screen, *engine.player, settings)
            draw_hud(screen, font, engine, settings)
            redraw = False

        pygame.display.flip()

        clock.tick(settings.fps)  # FPS limit

    engine.unsubscribe(on_move)
    pygame.quit()


#   ##    ##     ##     ########  ##    ##
#   ###  ###   ##  ##      ##     ####  ##
#   ## ## ##  ##    ##     ##     ## ## ##
#   ##    ##  ########     ##     ##  ####
#   ##    ##  ##    ##  ########  ##    ##


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(logging.INFO)

    map_path = Path(argv[0]) if argv else DEFAULT_MAP
    radius = int(argv[1]) if len(argv) > 1 else 5

    try:
        grid = GridMap.from_file(map_path)
        start = grid.first_open_cell()
    except MapError as err:
        log.error("Can't start demo", error=str(err))
        return 1

    pygame.freetype.init()
    settings = Settings(Coords(grid.xdims, grid.ydims), radius=radius)
    engine = FovEngine.from_grid(grid, visual_range=settings.radius)
    engine.set_player(*start)
    log.info("Demo started", map=str(map_path), player=start.as_tuple(), visual_range=engine.visual_range)

    run_game(engine, settings)
    return 0


if __name__ == "__main__":
    print("\n=====  2D Subtile Shadowcasting FOV  =====\n")
    sys.exit(main())
