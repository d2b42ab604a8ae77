"""
Keyboard Layout Module

Contains the static key tables for each supported keyboard layout, the canvas
geometry that projects grid coordinates into drawing units, and the character
resolution used by the signature path builder.
"""

import logging
from dataclasses import dataclass, field
from string import ascii_letters
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .errors import UnknownLayoutError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

KEY_SPACING = 60.0    # canvas units between neighbouring key origins
KEY_WIDTH = 56.0      # canvas units
KEY_HEIGHT = 48.0     # canvas units
PAD_X = 18.0          # canvas units around the key block
PAD_Y = 18.0

SUPPORTED_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")

DEFAULT_LAYOUT = "qwerty"


# =============================================================================
# Layout Row Data
# =============================================================================

# Each row is (y, x offset of the first key, key labels left to right).
# Labels outside SUPPORTED_CHARS still take up a column but are not resolvable.
NUMBER_ROW = (-1.0, 0.0, "1234567890_")

QWERTY_ROWS = [
    NUMBER_ROW,
    (0.0, 0.5, "QWERTYUIOP"),
    (1.0, 0.75, "ASDFGHJKL"),
    (2.0, 1.25, "ZXCVBNM"),
]

DVORAK_ROWS = [
    NUMBER_ROW,
    (0.0, 0.5, "',.PYFGCRL"),
    (1.0, 0.75, "AOEUIDHTNS"),
    (2.0, 1.25, ";QJKXBMWVZ"),
]


# =============================================================================
# Key Data Structures
# =============================================================================

@dataclass(frozen=True)
class Position:
    """A point in grid or canvas units."""
    x: float
    y: float


@dataclass(frozen=True)
class Key:
    """Represents a keyboard key at a grid coordinate."""
    label: str
    x: float          # Column, in key pitches
    y: float          # Row, in key pitches (grows downward)
    row: int

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)


@dataclass(frozen=True)
class ResolvedPoint:
    """A typed character that exists in the active layout."""
    position: Position
    source_char: str


@dataclass(frozen=True)
class KeyboardLayout:
    """
    A named, immutable character -> Key table.

    Letters are stored uppercase; lookups fold letter case.
    """
    layout_id: str
    keys: Mapping[str, Key] = field(repr=False)

    def lookup_label(self, char: str) -> Optional[str]:
        """Return the table label for a typed character, or None."""
        if not char or len(char) != 1:
            return None
        label = char.upper() if char in ascii_letters else char
        return label if label in self.keys else None

    def resolve(self, char: str) -> Optional[Position]:
        label = self.lookup_label(char)
        if label is None:
            return None
        return self.keys[label].position

    def bounds(self) -> Tuple[float, float, float, float]:
        """Tight bounding box over key positions as (min_x, min_y, max_x, max_y)."""
        xs = [k.x for k in self.keys.values()]
        ys = [k.y for k in self.keys.values()]
        return (min(xs), min(ys), max(xs), max(ys))

    @property
    def labels(self) -> FrozenSet[str]:
        return frozenset(self.keys)


# =============================================================================
# Layout Generation
# =============================================================================

def generate_layout(layout_id: str,
                    rows: Sequence[Tuple[float, float, str]]) -> KeyboardLayout:
    """
    Build a layout from row descriptions.

    Keys are placed left-to-right at one pitch each, starting from the row's
    x offset. Unsupported labels keep their column but are left out of the table.
    """
    keys: Dict[str, Key] = {}

    for row_idx, (y, x_offset, labels) in enumerate(rows):
        x = x_offset
        for label in labels:
            if label in SUPPORTED_CHARS:
                keys[label] = Key(label=label, x=x, y=y, row=row_idx)
            x += 1.0

    return KeyboardLayout(layout_id=layout_id, keys=MappingProxyType(keys))


LAYOUTS: Mapping[str, KeyboardLayout] = MappingProxyType({
    "qwerty": generate_layout("qwerty", QWERTY_ROWS),
    "dvorak": generate_layout("dvorak", DVORAK_ROWS),
})


def list_layouts() -> List[str]:
    return sorted(LAYOUTS)


def get_layout(layout_id: str) -> KeyboardLayout:
    try:
        return LAYOUTS[layout_id]
    except KeyError:
        raise UnknownLayoutError(layout_id) from None


def layout_bounds(layout_id: str) -> Tuple[float, float, float, float]:
    return get_layout(layout_id).bounds()


# =============================================================================
# Canvas Geometry
# =============================================================================

@dataclass(frozen=True)
class CanvasGeometry:
    """
    Projection from grid coordinates to canvas units.

    The shift moves the layout's bounding box to the origin; the padding
    surrounds the whole key block.
    """
    key_spacing: float = KEY_SPACING
    key_width: float = KEY_WIDTH
    key_height: float = KEY_HEIGHT
    pad_x: float = PAD_X
    pad_y: float = PAD_Y
    shift_x: float = 0.0
    shift_y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def for_layout(cls, layout: KeyboardLayout,
                   key_spacing: float = KEY_SPACING,
                   key_width: float = KEY_WIDTH,
                   key_height: float = KEY_HEIGHT,
                   pad_x: float = PAD_X,
                   pad_y: float = PAD_Y) -> 'CanvasGeometry':
        min_x, min_y, max_x, max_y = layout.bounds()
        return cls(
            key_spacing=key_spacing,
            key_width=key_width,
            key_height=key_height,
            pad_x=pad_x,
            pad_y=pad_y,
            shift_x=-min_x * key_spacing,
            shift_y=-min_y * key_spacing,
            width=(max_x - min_x) * key_spacing + key_width + pad_x * 2,
            height=(max_y - min_y) * key_spacing + key_height + pad_y * 2,
        )

    def key_origin(self, position: Position) -> Position:
        """Top-left corner of the key drawn at a grid position."""
        return Position(
            position.x * self.key_spacing + self.shift_x + self.pad_x,
            position.y * self.key_spacing + self.shift_y + self.pad_y,
        )

    def key_center(self, position: Position) -> Position:
        origin = self.key_origin(position)
        return Position(origin.x + self.key_width / 2, origin.y + self.key_height / 2)


# =============================================================================
# Character Resolution
# =============================================================================

def resolve(layout_id: str, char: str) -> Optional[Position]:
    """Grid position of a character in a layout, or None if it has no key."""
    return get_layout(layout_id).resolve(char)


def resolve_all(name: str, layout_id: str = DEFAULT_LAYOUT,
                canvas: Optional[CanvasGeometry] = None) -> List[ResolvedPoint]:
    """
    Resolve every character of ``name`` to the center of its key in canvas units.

    Characters without a key are dropped; they leave no gap in the result.
    """
    layout = get_layout(layout_id)
    if canvas is None:
        canvas = CanvasGeometry.for_layout(layout)

    points = []
    dropped = []
    for ch in name:
        position = layout.resolve(ch)
        if position is None:
            dropped.append(ch)
            continue
        points.append(ResolvedPoint(position=canvas.key_center(position), source_char=ch))

    if dropped:
        logger.debug("dropped %d unsupported character(s) for layout %s: %r",
                     len(dropped), layout_id, "".join(dropped))
    return points


def active_keys(name: str, layout_id: str = DEFAULT_LAYOUT) -> FrozenSet[str]:
    """Labels of every key used by ``name``."""
    layout = get_layout(layout_id)
    labels = (layout.lookup_label(ch) for ch in name)
    return frozenset(label for label in labels if label is not None)


def current_key(name: str, layout_id: str = DEFAULT_LAYOUT) -> Optional[str]:
    """Label of the key for the last typed character, if it has one."""
    if not name:
        return None
    return get_layout(layout_id).lookup_label(name[-1])


def print_layout_stats(layout_id: str):
    """Print a summary of a layout table."""
    layout = get_layout(layout_id)
    min_x, min_y, max_x, max_y = layout.bounds()
    canvas = CanvasGeometry.for_layout(layout)

    print(f"\n{layout_id}:")
    print("-" * 40)
    print(f"  Keys: {len(layout.keys)}")
    print(f"  Grid bounds: x {min_x:g}..{max_x:g}, y {min_y:g}..{max_y:g}")
    print(f"  Canvas: {canvas.width:g} x {canvas.height:g}")

    rows: Dict[int, List[Key]] = {}
    for key in layout.keys.values():
        rows.setdefault(key.row, []).append(key)
    for row_idx in sorted(rows):
        row_keys = sorted(rows[row_idx], key=lambda k: k.x)
        print(f"  Row {row_idx}: {''.join(k.label for k in row_keys)}")
