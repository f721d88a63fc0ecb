"""Settings for the Pygame visualization."""
from pygame.color import Color

from .helpers import Coords

MIN_VISUAL_RANGE = 1


class Settings:
    """Settings for Pygame.

    Window size is derived from `map_dims` and `tile_size` unless given.
    """

    def __init__(
        self,
        map_dims: Coords,
        width: int = 0,
        height: int = 0,
        radius: int = 5,
        max_radius: int = 63,
        tile_size: int = 32,
        line_width: int = 1,
        hud_height: int = 24,
        fps: int = 30,
        font_size: int = 16,
        font_color="snow",
        floor_color="steelblue2",
        floor_trim_color="steelblue4",
        wall_color="seagreen3",
        wall_trim_color="seagreen4",
        player_color="gold",
        unseen_color="gray15",
        background_color="black",
    ) -> None:
        if map_dims.x < 1 or map_dims.y < 1:
            raise ValueError("all map dimensions must be > 0!")
        if tile_size < 2 or tile_size % 2:
            raise ValueError("tile size must be an even number > 1!")

        self.map_dims = map_dims
        self.xdims, self.ydims = map_dims
        self.tile_size = tile_size
        self.subtile_size = tile_size // 2
        self.line_width = line_width
        self.hud_height = hud_height
        self.width = width or self.xdims * tile_size
        self.height = height or self.ydims * tile_size + hud_height
        self.fps = fps
        self.font_size = font_size
        self.font_color = Color(font_color)
        self.max_radius = max(max_radius, MIN_VISUAL_RANGE)
        self.radius = clamp_range(radius, self.max_radius)
        self.floor_color = Color(floor_color)
        self.floor_trim_color = Color(floor_trim_color)
        self.wall_color = Color(wall_color)
        self.wall_trim_color = Color(wall_trim_color)
        self.player_color = Color(player_color)
        self.unseen_color = Color(unseen_color)
        self.background_color = Color(background_color)


def clamp_range(radius: int, max_radius: int) -> int:
    """Visual range limited to [MIN_VISUAL_RANGE, max_radius]."""
    return max(MIN_VISUAL_RANGE, min(radius, max_radius))


def range_up(radius: int, max_radius: int) -> int:
    return clamp_range(radius + 1, max_radius)


def range_down(radius: int) -> int:
    """One less than `radius`, never below `MIN_VISUAL_RANGE`."""
    return max(MIN_VISUAL_RANGE, radius - 1)


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_settings_defaults():
    settings = Settings(Coords(20, 10), tile_size=16)
    assert (settings.width, settings.height) == (320, 160 + settings.hud_height)
    assert settings.subtile_size == 8
    assert settings.radius == 5
    assert settings.wall_color == Color("seagreen3")


def test_settings_bad_values():
    import pytest

    suite = [
        dict(map_dims=Coords(0, 5)),
        dict(map_dims=Coords(5, -1)),
        dict(map_dims=Coords(5, 5), tile_size=15),
        dict(map_dims=Coords(5, 5), tile_size=0),
    ]
    for kwargs in suite:
        with pytest.raises(ValueError):
            Settings(**kwargs)


def test_range_changes():
    suite = [
        (range_up(5, 10), 6),
        (range_up(10, 10), 10),
        (range_down(5), 4),
        (range_down(1), 1),
        (clamp_range(0, 10), 1),
        (clamp_range(99, 10), 10),
    ]
    for result, expected in suite:
        assert result == expected
