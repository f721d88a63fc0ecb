"""Recursive shadowcasting field of view at subtile (half-tile) resolution."""
from .engine import FovEngine
from .fov_recurse import fov_calc, scan_octant
from .helpers import Coords, Octant, OCTANT_RULES
from .subtiles import QUADRANTS, SubtileBuffer, exposed_quadrants, subtiles_of
from .text_render import render_lines, render_text, run_console
from .tilemap import Cell, GridMap, MapError

__all__ = [
    "Cell",
    "Coords",
    "FovEngine",
    "GridMap",
    "MapError",
    "OCTANT_RULES",
    "Octant",
    "QUADRANTS",
    "SubtileBuffer",
    "exposed_quadrants",
    "fov_calc",
    "render_lines",
    "render_text",
    "run_console",
    "scan_octant",
    "subtiles_of",
]
