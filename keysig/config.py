"""Signature configuration values."""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .keyboard import DEFAULT_LAYOUT, CanvasGeometry, get_layout
from .path import CurveMode, DashMode


# =============================================================================
# Configuration Constants
# =============================================================================

STROKE_WIDTH = 3.0
SUPERSAMPLE_SCALE = 2     # raster export renders at 2x canvas size
FLASH_SECONDS = 0.1       # key highlight duration after each edit


@dataclass(frozen=True)
class SignatureConfig:
    """Everything that shapes a signature apart from the typed name."""
    layout_id: str = DEFAULT_LAYOUT
    curve_mode: CurveMode = CurveMode.STRAIGHT
    dash_mode: DashMode = DashMode.ALPHABET
    canvas: Optional[CanvasGeometry] = field(default=None, compare=False)

    def __post_init__(self):
        get_layout(self.layout_id)
        object.__setattr__(self, "curve_mode", CurveMode.parse(self.curve_mode))
        object.__setattr__(self, "dash_mode", DashMode.parse(self.dash_mode))
        if self.canvas is None:
            object.__setattr__(self, "canvas", CanvasGeometry.for_layout(get_layout(self.layout_id)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SignatureConfig':
        """Build a config from plain values such as parsed CLI options or JSON."""
        return cls(
            layout_id=data.get("layout", DEFAULT_LAYOUT),
            curve_mode=data.get("curve_mode", CurveMode.STRAIGHT),
            dash_mode=data.get("dash_mode", DashMode.ALPHABET),
        )

    def with_layout(self, layout_id: str) -> 'SignatureConfig':
        return replace(self, layout_id=layout_id, canvas=None)

    def with_curve_mode(self, curve_mode) -> 'SignatureConfig':
        return replace(self, curve_mode=curve_mode)

    def with_dash_mode(self, dash_mode) -> 'SignatureConfig':
        return replace(self, dash_mode=dash_mode)
