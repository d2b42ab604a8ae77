"""
keysig: keyboard-path signatures.

Resolves typed characters to key positions, joins consecutive keys into
classified, styled segments, and encodes the result as a canonical codec
record that independent implementations can compare.
"""

from .classify import PairClass, classify
from .codec import (
    CodecRecord,
    CodecSegment,
    encode_codec,
    parse_codec_embedded,
    parse_codec_text,
    serialize_codec_embedded,
    serialize_codec_text,
    verify_provenance,
)
from .config import SignatureConfig
from .errors import CodecError, InvalidModeError, KeysigError, UnknownLayoutError
from .keyboard import LAYOUTS, Position, ResolvedPoint, resolve, resolve_all
from .path import CurveMode, DashMode, Segment, build_segments
from .signature import Signature, compute_signature
from .stream import fnv1a32, make_stream

__version__ = "0.1.0"

__all__ = [
    "CodecError",
    "CodecRecord",
    "CodecSegment",
    "CurveMode",
    "DashMode",
    "InvalidModeError",
    "KeysigError",
    "LAYOUTS",
    "PairClass",
    "Position",
    "ResolvedPoint",
    "Segment",
    "Signature",
    "SignatureConfig",
    "UnknownLayoutError",
    "build_segments",
    "classify",
    "compute_signature",
    "encode_codec",
    "fnv1a32",
    "make_stream",
    "parse_codec_embedded",
    "parse_codec_text",
    "resolve",
    "resolve_all",
    "serialize_codec_embedded",
    "serialize_codec_text",
    "verify_provenance",
]
