"""End-to-end signature pipeline: resolve, build, encode."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .codec import CodecRecord, encode_codec
from .config import SignatureConfig
from .keyboard import ResolvedPoint, resolve_all
from .path import Segment, build_segments
from .stream import signature_seed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Signature:
    name: str
    config: SignatureConfig
    points: Tuple[ResolvedPoint, ...]
    segments: Tuple[Segment, ...]
    codec: Optional[CodecRecord]

    def path_data(self) -> List[str]:
        return [s.geometry.path_data() for s in self.segments]


def compute_signature(name: str, config: Optional[SignatureConfig] = None) -> Signature:
    """
    Rebuild the whole signature for ``name``.

    No codec is produced when fewer than two characters resolve.
    """
    if config is None:
        config = SignatureConfig()

    points = resolve_all(name, config.layout_id, config.canvas)
    segments = build_segments(
        points,
        config.curve_mode,
        config.dash_mode,
        signature_seed(name, config.layout_id),
    )

    codec = None
    if name and len(points) >= 2:
        codec = encode_codec(name, config.layout_id, config.dash_mode, segments)
    else:
        logger.debug("no codec for %r: %d resolvable character(s)", name, len(points))

    return Signature(
        name=name,
        config=config,
        points=tuple(points),
        segments=tuple(segments),
        codec=codec,
    )
