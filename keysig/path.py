"""
Signature Path Builder

Walks consecutive resolved key positions and turns each pair into a styled
segment: pair class, direction and length features, a dash pattern, a colour
and the curve geometry used for drawing.
"""

import colorsys
import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .classify import PairClass, classify
from .errors import InvalidModeError
from .keyboard import KEY_SPACING, Position, ResolvedPoint
from .stream import fnv1a32, make_stream

logger = logging.getLogger(__name__)


# =============================================================================
# Modes
# =============================================================================

class _ModeEnum(str, Enum):

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise InvalidModeError(f"invalid {cls.__name__} {value!r} (expected one of: {choices})") from None


class CurveMode(_ModeEnum):
    STRAIGHT = "straight"
    QUADRATIC = "quadratic"
    CATMULL_ROM = "catmull-rom"


class DashMode(_ModeEnum):
    ALPHABET = "alphabet"
    LEGACY = "legacy"


# =============================================================================
# Style Tables
# =============================================================================

SOLID: Tuple[float, ...] = ()

# Allowed dash patterns per class, in draw order. UpperLower and LowerUpper
# share (8, 6).
DASH_CHOICES: Dict[PairClass, Tuple[Tuple[float, ...], ...]] = {
    PairClass.UPPER_UPPER: (SOLID,),
    PairClass.UPPER_LOWER: ((8, 6), (12, 4)),
    PairClass.LOWER_UPPER: ((8, 6), (4, 4)),
    PairClass.LOWER_LOWER: ((6, 4), (2, 6)),
    PairClass.NUMERIC_OR_UNDERSCORE: ((1, 8), (1, 5)),
}

LEGACY_DOTTED: Tuple[float, ...] = (1, 8)
LEGACY_DASHED: Tuple[float, ...] = (8, 6)

# (saturation %, lightness %) before the length adjustment
COLOR_BASE: Dict[PairClass, Tuple[float, float]] = {
    PairClass.UPPER_UPPER: (70.0, 62.0),
    PairClass.UPPER_LOWER: (65.0, 58.0),
    PairClass.LOWER_UPPER: (60.0, 56.0),
    PairClass.LOWER_LOWER: (55.0, 64.0),
    PairClass.NUMERIC_OR_UNDERSCORE: (45.0, 70.0),
}
COLOR_ADJUST_LIMIT = 8.0

LENGTH_BIN_EDGES = (40.0, 80.0, 120.0)

QUAD_MAX_AMPLITUDE = 12.0
QUAD_AMPLITUDE_RATIO = 0.22
CATMULL_ROM_ALPHA = 0.5


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class StyleDescriptor:
    """Render-only styling of a segment."""
    dash: Tuple[float, ...]
    hue: int
    saturation: float
    lightness: float

    @property
    def is_solid(self) -> bool:
        return not self.dash

    @property
    def color(self) -> str:
        """CSS hsl() colour string."""
        return f"hsl({self.hue}, {self.saturation:.1f}%, {self.lightness:.1f}%)"

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return colorsys.hls_to_rgb(self.hue / 360.0, self.lightness / 100.0, self.saturation / 100.0)

    @property
    def dasharray(self) -> Optional[str]:
        if self.is_solid:
            return None
        return " ".join(fmt(v) for v in self.dash)


@dataclass(frozen=True)
class CurveDescriptor:
    """
    Drawable geometry of one segment.

    ``points`` holds the start point, any control points, then the end point:
    2 for a line, 3 for a quadratic, 4 for a cubic.
    """
    kind: str
    points: Tuple[Position, ...]

    @property
    def start(self) -> Position:
        return self.points[0]

    @property
    def end(self) -> Position:
        return self.points[-1]

    @property
    def controls(self) -> Tuple[Position, ...]:
        return self.points[1:-1]

    def path_data(self) -> str:
        """SVG path ``d`` attribute."""
        command = {"line": "L", "quadratic": "Q", "cubic": "C"}[self.kind]
        rest = " ".join(f"{fmt(p.x)} {fmt(p.y)}" for p in self.points[1:])
        return f"M {fmt(self.start.x)} {fmt(self.start.y)} {command} {rest}"


@dataclass(frozen=True)
class Segment:
    """One drawable, classified step between two consecutive resolved characters."""
    start: ResolvedPoint
    end: ResolvedPoint
    pair_class: PairClass
    direction: int
    length_bin: int
    length: float
    style: StyleDescriptor
    geometry: CurveDescriptor


def fmt(v: float) -> str:
    return f"{v:.3f}".rstrip("0").rstrip(".")


# =============================================================================
# Features
# =============================================================================

def direction_bucket(dx: float, dy: float) -> int:
    """
    Eight-way compass bucket of a canvas-space step.

    0 is east and buckets increase counterclockwise; canvas y grows downward,
    so an upward step (dy < 0) is bucket 2. Halfway angles round up.
    """
    angle = math.atan2(-dy, dx)
    return int(math.floor(angle / (math.pi / 4) + 0.5)) % 8


def length_bin(length: float) -> int:
    return bisect_right(LENGTH_BIN_EDGES, length)


def select_dash(pair_class: PairClass, dash_mode: DashMode,
                draw: Optional[Callable[[], float]] = None) -> Tuple[float, ...]:
    """
    Pick the dash pattern for a segment.

    Alphabet mode consumes exactly one draw; legacy mode consumes none.
    """
    if dash_mode is DashMode.LEGACY:
        if pair_class is PairClass.NUMERIC_OR_UNDERSCORE:
            return LEGACY_DOTTED
        if pair_class is PairClass.UPPER_UPPER:
            return SOLID
        return LEGACY_DASHED

    choices = DASH_CHOICES[pair_class]
    value = draw()
    return choices[int(math.floor(value * len(choices))) % len(choices)]


def segment_color(a: str, b: str, pair_class: PairClass, length: float) -> Tuple[int, float, float]:
    """(hue, saturation, lightness) of a segment; cosmetic only."""
    hue = fnv1a32(a + b + pair_class.value) % 360
    base_s, base_l = COLOR_BASE[pair_class]
    adjust = min(COLOR_ADJUST_LIMIT, max(-COLOR_ADJUST_LIMIT, (length - KEY_SPACING) / 10.0))
    return hue, base_s + adjust, base_l - adjust / 2.0


# =============================================================================
# Geometry
# =============================================================================

def _as_array(p: Position) -> np.ndarray:
    return np.array([p.x, p.y], dtype=float)


def _as_position(v: np.ndarray) -> Position:
    return Position(float(v[0]), float(v[1]))


def straight_curve(a: Position, b: Position) -> CurveDescriptor:
    return CurveDescriptor("line", (a, b))


def quadratic_curve(prev: Position, a: Position, b: Position) -> CurveDescriptor:
    """
    Quadratic bend with its control point pushed off the segment midpoint.

    The bend side follows the turn from ``prev`` through ``a`` to ``b`` so
    consecutive curves keep turning the same way.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy) or 1.0
    nx = -dy / length
    ny = dx / length

    cross = (a.x - prev.x) * (b.y - a.y) - (a.y - prev.y) * (b.x - a.x)
    sign = 1.0 if cross == 0 else math.copysign(1.0, cross)
    amplitude = min(QUAD_MAX_AMPLITUDE, length * QUAD_AMPLITUDE_RATIO)

    control = Position(
        (a.x + b.x) / 2 + nx * amplitude * sign,
        (a.y + b.y) / 2 + ny * amplitude * sign,
    )
    return CurveDescriptor("quadratic", (a, control, b))


def catmull_rom_curve(p0: Position, p1: Position, p2: Position, p3: Position,
                      alpha: float = CATMULL_ROM_ALPHA) -> CurveDescriptor:
    """
    Cubic Bezier equivalent of the Catmull-Rom span from p1 to p2.

    Knot spacing is the inter-point distance raised to ``alpha`` (0.5 gives the
    centripetal variant). Zero distances are replaced by 1.
    """
    q0, q1, q2, q3 = (_as_array(p) for p in (p0, p1, p2, p3))

    d1 = np.linalg.norm(q1 - q0) ** alpha or 1.0
    d2 = np.linalg.norm(q2 - q1) ** alpha or 1.0
    d3 = np.linalg.norm(q3 - q2) ** alpha or 1.0

    c1 = (d1 * d1 * q2 - d2 * d2 * q0 + (2 * d1 * d1 + 3 * d1 * d2 + d2 * d2) * q1) / (3 * d1 * (d1 + d2))
    c2 = (d3 * d3 * q1 - d2 * d2 * q3 + (2 * d3 * d3 + 3 * d3 * d2 + d2 * d2) * q2) / (3 * d3 * (d3 + d2))

    return CurveDescriptor("cubic", (p1, _as_position(c1), _as_position(c2), p2))


def segment_geometry(points: Sequence[ResolvedPoint], i: int, curve_mode: CurveMode) -> CurveDescriptor:
    """Geometry of the segment from points[i] to points[i + 1]."""
    a = points[i].position
    b = points[i + 1].position

    if curve_mode is CurveMode.STRAIGHT:
        return straight_curve(a, b)

    prev = points[i - 1].position if i > 0 else a
    if curve_mode is CurveMode.QUADRATIC:
        return quadratic_curve(prev, a, b)

    after = points[i + 2].position if i + 2 < len(points) else b
    return catmull_rom_curve(prev, a, b, after)


# =============================================================================
# Builder
# =============================================================================

def build_segments(points: Sequence[ResolvedPoint],
                   curve_mode=CurveMode.STRAIGHT,
                   dash_mode=DashMode.ALPHABET,
                   seed: str = "") -> List[Segment]:
    """
    Build one segment per consecutive pair of resolved points.

    Fewer than two points give an empty list. In alphabet mode dash draws come
    from a stream seeded by ``seed``, one per segment, in path order.
    """
    curve_mode = CurveMode.parse(curve_mode)
    dash_mode = DashMode.parse(dash_mode)

    if len(points) < 2:
        return []

    draw = make_stream(seed) if dash_mode is DashMode.ALPHABET else None
    segments = []

    for i in range(len(points) - 1):
        start, end = points[i], points[i + 1]
        dx = end.position.x - start.position.x
        dy = end.position.y - start.position.y
        length = math.hypot(dx, dy)
        pair_class = classify(start.source_char, end.source_char)

        dash = select_dash(pair_class, dash_mode, draw)
        hue, saturation, lightness = segment_color(start.source_char, end.source_char, pair_class, length)

        segments.append(Segment(
            start=start,
            end=end,
            pair_class=pair_class,
            direction=direction_bucket(dx, dy),
            length_bin=length_bin(length),
            length=length,
            style=StyleDescriptor(dash=dash, hue=hue, saturation=saturation, lightness=lightness),
            geometry=segment_geometry(points, i, curve_mode),
        ))

    logger.debug("built %d segment(s), curve=%s dash=%s", len(segments), curve_mode.value, dash_mode.value)
    return segments
