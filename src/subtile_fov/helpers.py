"""Helper functions and classes for Subtile FOV."""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


@dataclass
class Coords:
    """2D map integer coordinates."""

    __slots__ = ["x", "y"]
    x: int
    y: int

    def __iter__(self):
        return iter((self.x, self.y))

    def __repr__(self) -> str:
        return f"{self.x, self.y}"

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


class Octant(Enum):
    """Octant for use in FOV calcs. Octant 1 is NNW.  Count CW.

    ```
        \\ 1 | 2 /
       8 \\  |  / 3
       -----+-----
       7 /  |  \\ 4
        / 6 | 5 \\
    ```
    """

    O1 = 1  # NNW
    O2 = 2  # NNE
    O3 = 3  # ENE
    O4 = 4  # ESE
    O5 = 5  # SSE
    O6 = 6  # SSW
    O7 = 7  # WSW
    O8 = 8  # WNW


class OctantRules:
    """Coordinate transform and slope conventions for one `Octant`.

    Within a scan frame the primary coordinate is fixed at `depth` from the
    observer and the secondary coordinate is swept toward the centerline.

    ### Fields

    `primary`: str
        "y" for octants scanned row-by-row (1, 2, 5, 6), "x" for octants
        scanned column-by-column (3, 4, 7, 8).
    `pri_dir`: int
        +1/-1 direction of increasing depth along the primary axis.
    `step`: int
        +1/-1 sweep direction along the secondary axis.
    `invert`: bool
        Slope is Δy/Δx when `True` (column scans), else Δx/Δy.
    `sign`: int
        Sign of the raw slope of every tile inside the octant. Slopes are
        stored as `sign * slope`, so every octant compares with `>=`.
    """

    __slots__ = "octant", "primary", "pri_dir", "step", "invert", "sign"

    def __init__(self, octant: Octant, primary: str, pri_dir: int, step: int, sign: int):
        self.octant = octant
        self.primary = primary
        self.pri_dir = pri_dir
        self.step = step
        self.invert = primary == "x"
        self.sign = sign

    def __repr__(self) -> str:
        return f"OctantRules {self.octant.name} pri: {self.primary}{self.pri_dir:+} step: {self.step:+}"

    def to_xy(self, pri: int, sec: int) -> Tuple[int, int]:
        """Converts (primary, secondary) map coordinates to (x, y)."""
        if self.primary == "y":
            return sec, pri
        return pri, sec

    def origin_pri_sec(self, ox: int, oy: int) -> Tuple[int, int]:
        """Observer's (primary, secondary) map coordinates."""
        if self.primary == "y":
            return oy, ox
        return ox, oy

    def slope_to(self, x: float, y: float, ox: int, oy: int) -> float:
        """Sign-adjusted slope from observer (ox, oy) to point (x, y)."""
        return self.sign * slope(x, y, ox, oy, self.invert)

    def shadow_corner(self, x: int, y: int) -> Tuple[float, float]:
        """Near corner of tile (x, y) on the side of the previously swept tile.

        Used to narrow the end slope behind the leading edge of a wall.
        """
        return self._corner(x, y, -0.5 * self.pri_dir)

    def light_corner(self, x: int, y: int) -> Tuple[float, float]:
        """Far corner of tile (x, y) on the side of the previously swept tile.

        Used to tighten the start slope past the trailing edge of a wall.
        """
        return self._corner(x, y, 0.5 * self.pri_dir)

    def _corner(self, x: int, y: int, pri_offset: float) -> Tuple[float, float]:
        sec_offset = -0.5 * self.step
        if self.primary == "y":
            return x + sec_offset, y + pri_offset
        return x + pri_offset, y + sec_offset


OCTANT_RULES = {
    Octant.O1: OctantRules(Octant.O1, "y", -1, 1, 1),
    Octant.O2: OctantRules(Octant.O2, "y", -1, -1, -1),
    Octant.O3: OctantRules(Octant.O3, "x", 1, 1, -1),
    Octant.O4: OctantRules(Octant.O4, "x", 1, -1, 1),
    Octant.O5: OctantRules(Octant.O5, "y", 1, -1, 1),
    Octant.O6: OctantRules(Octant.O6, "y", 1, 1, -1),
    Octant.O7: OctantRules(Octant.O7, "x", -1, -1, -1),
    Octant.O8: OctantRules(Octant.O8, "x", -1, 1, 1),
}


#   ########  ##    ##  ##    ##   ######   ########  ########   ######   ##    ##
#   ##        ##    ##  ####  ##  ##    ##     ##        ##     ##    ##  ####  ##
#   ######    ##    ##  ## ## ##  ##           ##        ##     ##    ##  ## ## ##
#   ##        ##    ##  ##  ####  ##    ##     ##        ##     ##    ##  ##  ####
#   ##         ######   ##    ##   ######      ##     ########   ######   ##    ##


def slope(x1: float, y1: float, x2: float, y2: float, invert: bool) -> float:
    """Gradient of the line through (x1, y1) and (x2, y2).

    Returns Δx/Δy, or Δy/Δx if `invert` is `True`. The caller guarantees the
    divisor is non-zero: scans never test the observer's own row or column.
    """
    if invert:
        return (y1 - y2) / (x1 - x2)
    return (x1 - x2) / (y1 - y2)


def squared_distance(x1: int, y1: int, x2: int, y2: int) -> int:
    """Squared euclidean distance, compared against `radius * radius`."""
    dx = x1 - x2
    dy = y1 - y2
    return dx * dx + dy * dy


def clamp(value: int, dims: int) -> int:
    """Clamps `value` into the range [0, dims)."""
    if value < 0:
        return 0
    if value >= dims:
        return dims - 1
    return value


#   ########  ########   ######   ########   ######
#      ##     ##        ##           ##     ##
#      ##     ######     ######      ##      ######
#      ##     ##              ##     ##           ##
#      ##     ########  #######      ##     #######


def test_slope():
    suite = [
        ((0, 0, 2, 2, False), 1.0),
        ((3, 0, 2, 2, False), -0.5),
        ((1.5, 1.5, 2, 2, False), 1.0),
        ((2.5, 1.5, 2, 2, False), -1.0),
        ((0, 1, 2, 2, True), 0.5),
        ((4, 0, 2, 2, True), -1.0),
        ((2, 2, 4, 3, False), 2.0),
        ((2, 2, 4, 3, True), 0.5),
    ]
    for args, expected in suite:
        assert slope(*args) == expected


def test_squared_distance():
    suite = [
        ((0, 0, 0, 0), 0),
        ((0, 0, 1, 0), 1),
        ((0, 0, 0, -1), 1),
        ((1, 1, -1, -1), 8),
        ((2, 2, 5, 6), 25),
        ((5, 6, 2, 2), 25),
    ]
    for args, expected in suite:
        assert squared_distance(*args) == expected


def test_clamp():
    suite = [(-3, 5, 0), (-1, 5, 0), (0, 5, 0), (4, 5, 4), (5, 5, 4), (9, 5, 4)]
    for value, dims, expected in suite:
        assert clamp(value, dims) == expected


def test_octant_slope_signs():
    """Every tile inside an octant has a non-negative sign-adjusted slope."""
    ox, oy = 10, 10
    for octant, rules in OCTANT_RULES.items():
        for depth in range(1, 6):
            for offset in range(depth + 1):
                pri, sec = rules.origin_pri_sec(ox, oy)
                x, y = rules.to_xy(pri + rules.pri_dir * depth, sec - rules.step * offset)
                assert rules.slope_to(x, y, ox, oy) >= 0, (octant, depth, offset)


def test_octant_corners():
    suite = [
        (Octant.O1, (2, 1), (1.5, 1.5), (1.5, 0.5)),
        (Octant.O2, (2, 1), (2.5, 1.5), (2.5, 0.5)),
        (Octant.O3, (3, 2), (2.5, 1.5), (3.5, 1.5)),
        (Octant.O4, (3, 2), (2.5, 2.5), (3.5, 2.5)),
        (Octant.O5, (2, 3), (2.5, 2.5), (2.5, 3.5)),
        (Octant.O6, (2, 3), (1.5, 2.5), (1.5, 3.5)),
        (Octant.O7, (1, 2), (1.5, 2.5), (0.5, 2.5)),
        (Octant.O8, (1, 2), (1.5, 1.5), (0.5, 1.5)),
    ]
    for octant, xy, shadow, light in suite:
        rules = OCTANT_RULES[octant]
        assert rules.shadow_corner(*xy) == shadow
        assert rules.light_corner(*xy) == light


def test_coords():
    c = Coords(3, 4)
    x, y = c
    assert (x, y) == (3, 4)
    assert c.as_tuple() == (3, 4)
    assert c == Coords(3, 4)
    assert c != Coords(4, 3)


if __name__ == "__main__":
    print("-----  Octant Rules -----\n")

    for octant, rules in OCTANT_RULES.items():
        print(f"{octant.name}: {rules}")
