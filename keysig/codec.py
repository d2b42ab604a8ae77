"""
Canonical signature codec.

A codec record keeps only the structural features of a signature (pair
classes, directions, length bins and the characters that produced them) plus a
provenance hash, so two renderings with different colours or curves of the
same name, layout and dash mode encode identically.
"""

import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple
from xml.sax.saxutils import escape

from .classify import PairClass
from .errors import CodecError
from .path import DashMode, Segment
from .stream import hash_hex

logger = logging.getLogger(__name__)

CODEC_VERSION = "keysig-codec/1"
COLOR_SCHEME = "pair-hsl"
METADATA_ID = "keysig-codec"

# The five markup specials; ElementTree leaves quotes unescaped in text nodes.
MARKUP_ENTITIES = {"'": "&apos;", '"': "&quot;"}


@dataclass(frozen=True)
class CodecSegment:
    a: str
    b: str
    pair_class: PairClass
    direction: int
    length_bin: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "a": self.a,
            "b": self.b,
            "class": self.pair_class.value,
            "direction": self.direction,
            "lengthBin": self.length_bin,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodecSegment':
        try:
            segment = cls(
                a=_expect(data["a"], str, "a"),
                b=_expect(data["b"], str, "b"),
                pair_class=PairClass(data["class"]),
                direction=_expect(data["direction"], int, "direction"),
                length_bin=_expect(data["lengthBin"], int, "lengthBin"),
            )
        except KeyError as e:
            raise CodecError(f"codec segment is missing field {e.args[0]!r}") from None
        except ValueError as e:
            raise CodecError(f"invalid codec segment: {e}") from None
        if not 0 <= segment.direction <= 7:
            raise CodecError(f"segment direction out of range: {segment.direction}")
        if not 0 <= segment.length_bin <= 3:
            raise CodecError(f"segment length bin out of range: {segment.length_bin}")
        return segment


@dataclass(frozen=True)
class CodecRecord:
    """Versioned, styling-independent description of one signature."""
    version: str
    layout: str
    dash_mode: DashMode
    color_scheme: str
    length: int
    provenance_hash: str
    segments: Tuple[CodecSegment, ...]

    def matches(self, other: 'CodecRecord') -> bool:
        """True when both records describe the same signature."""
        return (self.layout == other.layout
                and self.dash_mode == other.dash_mode
                and self.length == other.length
                and self.segments == other.segments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "layout": self.layout,
            "dashMode": self.dash_mode.value,
            "colorScheme": self.color_scheme,
            "length": self.length,
            "provenanceHash": self.provenance_hash,
            "segments": [s.to_dict() for s in self.segments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodecRecord':
        if not isinstance(data, dict):
            raise CodecError("codec record must be an object")
        try:
            segments = data["segments"]
            if not isinstance(segments, list):
                raise CodecError("codec segments must be a list")
            return cls(
                version=_expect(data["version"], str, "version"),
                layout=_expect(data["layout"], str, "layout"),
                dash_mode=DashMode(data["dashMode"]),
                color_scheme=_expect(data["colorScheme"], str, "colorScheme"),
                length=_expect(data["length"], int, "length"),
                provenance_hash=_expect(data["provenanceHash"], str, "provenanceHash"),
                segments=tuple(CodecSegment.from_dict(s) for s in segments),
            )
        except KeyError as e:
            raise CodecError(f"codec record is missing field {e.args[0]!r}") from None
        except (TypeError, ValueError) as e:
            if isinstance(e, CodecError):
                raise
            raise CodecError(f"invalid codec record: {e}") from None


def _expect(value, kind, field_name):
    # bool is an int subclass but never a valid count
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise CodecError(f"codec field {field_name!r} must be {kind.__name__}, got {value!r}")
    return value


# =============================================================================
# Encoding
# =============================================================================

def provenance_hash(layout_id: str, name: str) -> str:
    return hash_hex(f"{layout_id}|{name.lower()}")


def encode_codec(name: str, layout_id: str, dash_mode, segments: Iterable[Segment]) -> CodecRecord:
    """Build the codec record for a finished signature."""
    dash_mode = DashMode.parse(dash_mode)
    record = CodecRecord(
        version=CODEC_VERSION,
        layout=layout_id,
        dash_mode=dash_mode,
        color_scheme=COLOR_SCHEME,
        length=len(name),
        provenance_hash=provenance_hash(layout_id, name),
        segments=tuple(
            CodecSegment(
                a=s.start.source_char,
                b=s.end.source_char,
                pair_class=s.pair_class,
                direction=s.direction,
                length_bin=s.length_bin,
            )
            for s in segments
        ),
    )
    logger.debug("encoded codec %s for layout %s with %d segment(s)",
                 record.provenance_hash, layout_id, len(record.segments))
    return record


def verify_provenance(record: CodecRecord, name: str) -> bool:
    """Check the record's hash against a claimed input name."""
    return record.provenance_hash == provenance_hash(record.layout, name)


# =============================================================================
# Serialization
# =============================================================================

def serialize_codec_text(record: CodecRecord) -> str:
    """Pretty, self-describing JSON."""
    return json.dumps(record.to_dict(), indent=2, ensure_ascii=False) + "\n"


def parse_codec_text(text: str) -> CodecRecord:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CodecError(f"codec text is not valid JSON: {e}") from None
    return CodecRecord.from_dict(data)


def serialize_codec_embedded(record: CodecRecord) -> str:
    """
    A ``<metadata>`` element holding the compact JSON record.

    ``< > & ' "`` are all entity-escaped so the element can be pasted into any
    attribute-free text position of an XML document.
    """
    payload = json.dumps(record.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return (f'<metadata id="{METADATA_ID}" data-version="{escape(record.version, MARKUP_ENTITIES)}">'
            f"{escape(payload, MARKUP_ENTITIES)}</metadata>")


def codec_from_element(element: ET.Element) -> CodecRecord:
    return parse_codec_text(element.text or "")


def parse_codec_embedded(text: str) -> CodecRecord:
    try:
        element = ET.fromstring(text)
    except ET.ParseError as e:
        raise CodecError(f"embedded codec is not well-formed XML: {e}") from None
    if element.tag.rsplit("}", 1)[-1] != "metadata":
        raise CodecError(f"expected a <metadata> element, got <{element.tag}>")
    return codec_from_element(element)
