"""
Signature Rendering

Draws computed signatures: a matplotlib preview over the key layout, a
supersampled PNG raster, and a standalone SVG document carrying the embedded
codec record.
"""

import math
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

import matplotlib.patches as patches
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.path import Path as MplPath

from .codec import METADATA_ID, CodecRecord, codec_from_element, serialize_codec_embedded
from .config import STROKE_WIDTH, SUPERSAMPLE_SCALE
from .errors import CodecError
from .keyboard import get_layout
from .path import Segment, fmt
from .signature import Signature

SVG_NS = "http://www.w3.org/2000/svg"
BASE_DPI = 100  # one canvas unit is one pixel at scale 1

# characters XML 1.0 cannot carry, even as references
_XML_INVALID = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

_PATH_CODES = {
    "line": [MplPath.MOVETO, MplPath.LINETO],
    "quadratic": [MplPath.MOVETO, MplPath.CURVE3, MplPath.CURVE3],
    "cubic": [MplPath.MOVETO, MplPath.CURVE4, MplPath.CURVE4, MplPath.CURVE4],
}


# =============================================================================
# Matplotlib Drawing
# =============================================================================

def segment_patch(segment: Segment, color=None, linewidth: float = STROKE_WIDTH) -> patches.PathPatch:
    """A matplotlib patch tracing one segment with its dash pattern."""
    geometry = segment.geometry
    path = MplPath([(p.x, p.y) for p in geometry.points], _PATH_CODES[geometry.kind])

    # matplotlib scales dash lengths by the line width
    if segment.style.is_solid:
        linestyle = "solid"
    else:
        linestyle = (0, tuple(v / linewidth for v in segment.style.dash))

    return patches.PathPatch(
        path,
        fill=False,
        edgecolor=color if color is not None else segment.style.rgb,
        linewidth=linewidth * 72.0 / BASE_DPI,
        linestyle=linestyle,
        capstyle="round",
        joinstyle="round",
    )


def draw_keys(ax, signature: Signature, show_labels: bool = True):
    """Draw the layout's keys, shading the ones the name uses."""
    layout = get_layout(signature.config.layout_id)
    canvas = signature.config.canvas
    used = {layout.lookup_label(ch) for ch in signature.name}
    last = layout.lookup_label(signature.name[-1]) if signature.name else None

    for label, key in layout.keys.items():
        origin = canvas.key_origin(key.position)
        if label == last:
            facecolor = (1.0, 1.0, 1.0, 0.5)
        elif label in used:
            facecolor = (0.09, 0.09, 0.09, 1.0)
        else:
            facecolor = (0.0, 0.0, 0.0, 0.0)

        rect = patches.FancyBboxPatch(
            (origin.x, origin.y),
            canvas.key_width,
            canvas.key_height,
            boxstyle="round,pad=0,rounding_size=8",
            linewidth=1,
            edgecolor=(0.25, 0.25, 0.25, 0.8),
            facecolor=facecolor,
        )
        ax.add_patch(rect)

        if show_labels:
            ax.text(origin.x + canvas.key_width / 2, origin.y + canvas.key_height / 2, label,
                    ha='center', va='center',
                    fontsize=8, family='monospace', color=(0.8, 0.8, 0.8))


def draw_signature(ax, signature: Signature, color=None, show_keys: bool = False):
    """Draw a signature onto an axes in canvas coordinates (y down)."""
    canvas = signature.config.canvas

    if show_keys:
        draw_keys(ax, signature)

    for segment in signature.segments:
        ax.add_patch(segment_patch(segment, color=color))

    ax.set_xlim(0, canvas.width)
    ax.set_ylim(canvas.height, 0)
    ax.set_aspect('equal')
    ax.axis('off')


def visualize_signature(signature: Signature, title: Optional[str] = None, show_keys: bool = True):
    """Show a signature over its keyboard layout."""
    canvas = signature.config.canvas
    fig, ax = plt.subplots(1, 1, figsize=(canvas.width / BASE_DPI * 1.5, canvas.height / BASE_DPI * 1.5))
    fig.patch.set_facecolor('black')

    draw_signature(ax, signature, show_keys=show_keys)
    ax.set_title(title or signature.name, fontsize=14, fontweight='bold', color='white')

    plt.tight_layout()
    plt.show()
    plt.close(fig)


def compare_signatures(signatures: List[Tuple[str, Signature]]):
    """Show several signatures side by side."""
    n = len(signatures)
    fig, axes = plt.subplots(1, n, figsize=(6 * n, 3))
    fig.patch.set_facecolor('black')

    if n == 1:
        axes = [axes]

    for ax, (title, signature) in zip(axes, signatures):
        draw_signature(ax, signature, show_keys=True)
        ax.set_title(title, fontsize=11, fontweight='bold', color='white')

    plt.tight_layout()
    plt.show()
    plt.close(fig)


def raster_figure(signature: Signature, scale: int = SUPERSAMPLE_SCALE) -> Figure:
    """
    Figure sized to the canvas at ``scale`` pixels per canvas unit.

    White strokes on black, matching the PNG export.
    """
    canvas = signature.config.canvas
    fig = Figure(figsize=(canvas.width / BASE_DPI, canvas.height / BASE_DPI), dpi=BASE_DPI * scale)
    fig.patch.set_facecolor('black')
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_facecolor('black')
    draw_signature(ax, signature, color='white')
    return fig


def save_signature_png(signature: Signature, path, scale: int = SUPERSAMPLE_SCALE):
    fig = raster_figure(signature, scale)
    fig.savefig(path, dpi=BASE_DPI * scale, facecolor='black')


# =============================================================================
# SVG Export
# =============================================================================

def signature_svg(signature: Signature, stroke: str = "black", colored: bool = False) -> str:
    """
    Standalone SVG document for a signature.

    With ``colored`` each path uses its segment colour instead of ``stroke``.
    The codec record, when there is one, is embedded as ``<metadata>``.
    """
    canvas = signature.config.canvas
    width = math.ceil(canvas.width)
    height = math.ceil(canvas.height)

    title = _XML_INVALID.sub("", signature.name)

    parts: List[str] = []
    parts.append('<?xml version="1.0" encoding="UTF-8"?>')
    parts.append(f'<svg xmlns="{SVG_NS}" width="{width}" height="{height}" viewBox="0 0 {width} {height}">')
    parts.append(f"  <title>{escape(title)}</title>")
    if signature.codec is not None:
        parts.append("  " + serialize_codec_embedded(signature.codec))
    for segment in signature.segments:
        color = segment.style.color if colored else stroke
        dash = segment.style.dasharray
        dash_attr = f' stroke-dasharray="{dash}"' if dash else ""
        parts.append(
            f'  <path d="{segment.geometry.path_data()}" stroke="{color}" stroke-width="{fmt(STROKE_WIDTH)}" '
            f'fill="none" stroke-linecap="round" stroke-linejoin="round"{dash_attr}/>'
        )
    parts.append("</svg>")
    parts.append("")
    return "\n".join(parts)


def extract_codec_from_svg(svg_text: str) -> CodecRecord:
    """Read the embedded codec record back out of an SVG document."""
    try:
        root = ET.fromstring(svg_text.encode("utf-8"))
    except ET.ParseError as e:
        raise CodecError(f"SVG is not well-formed XML: {e}") from None

    for element in root.iter():
        if element.tag.rsplit("}", 1)[-1] == "metadata" and element.get("id") == METADATA_ID:
            return codec_from_element(element)
    raise CodecError("SVG has no embedded signature codec")
