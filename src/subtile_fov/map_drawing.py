"""Top-down drawing functions for subtile FOV maps."""
import pygame, pygame.freetype
from pygame import Vector2
from pygame.color import Color
from pygame.freetype import Font
from pygame.surface import Surface

from .engine import FovEngine
from .settings import Settings
from .tilemap import Cell


def draw_floor(screen: Surface, pr: Vector2, sts: int, width: int, color: Color, trim: Color):
    """Draws a floor subtile with reference point `pr` and subtile size `sts`."""
    p1 = Vector2(pr.x, pr.y)
    p2 = Vector2(pr.x + sts, pr.y)
    p3 = Vector2(pr.x + sts, pr.y + sts)
    p4 = Vector2(pr.x, pr.y + sts)

    pygame.draw.polygon(screen, trim, [p1, p2, p3, p4])
    pygame.draw.lines(screen, color, True, [p1, p2, p3, p4], width=width)


def draw_wall(screen: Surface, pr: Vector2, sts: int, width: int, color: Color, trim: Color):
    """Draws a wall subtile with reference point `pr` and subtile size `sts`."""
    p1 = Vector2(pr.x, pr.y)
    p2 = Vector2(pr.x + sts, pr.y)
    p3 = Vector2(pr.x + sts, pr.y + sts)
    p4 = Vector2(pr.x, pr.y + sts)

    pygame.draw.polygon(screen, color, [p1, p2, p3, p4])
    pygame.draw.lines(screen, trim, True, [p1, p2, p3, p4], width=width)


def draw_unseen(screen: Surface, pr: Vector2, sts: int, color: Color):
    """Draws a hidden subtile with reference point `pr` and subtile size `sts`."""
    pygame.draw.rect(screen, color, (pr.x, pr.y, sts, sts))


def draw_map(screen: Surface, engine: FovEngine, settings: Settings):
    """Renders every subtile of the map, accounting for FOV."""
    s = settings
    sts = s.subtile_size
    w = s.line_width
    grid = engine.grid
    offset = s.hud_height

    # Row is sy; col is sx
    for sy in range(grid.ydims * 2):
        for sx in range(grid.xdims * 2):
            pr = Vector2(sx * sts, sy * sts + offset)

            if not engine.is_subtile_visible(sx, sy):
                draw_unseen(screen, pr, sts, s.unseen_color)
            elif grid.get(sx // 2, sy // 2) == Cell.OPAQUE:
                draw_wall(screen, pr, sts, w, s.wall_color, s.wall_trim_color)
            else:
                draw_floor(screen, pr, sts, w, s.floor_color, s.floor_trim_color)


def draw_player(screen: Surface, px: int, py: int, settings: Settings):
    """Renders the player (always visible) on the map."""
    ts = settings.tile_size
    mid = ts * 0.5
    center = (px * ts + mid, py * ts + mid + settings.hud_height)

    pygame.draw.circle(screen, settings.player_color, center, mid * 0.6)


def draw_hud(screen: Surface, font: Font, engine: FovEngine, settings: Settings):
    """Renders the status line: player position, visual range and controls."""
    px, py = engine.player
    text = (
        f"({px}, {py})  range: {engine.visual_range}  "
        f"visible: {len(engine.visible_tiles())}  "
        "[WASD/arrows] move  [+/-] range  [Q/Esc] quit"
    )
    font.render_to(screen, (4, 4), text, settings.font_color)
