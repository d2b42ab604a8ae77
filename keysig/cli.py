"""
keysig command line.

Usage
-----
    keysig codec "Ab_3"                       # pretty codec JSON
    keysig codec "Ab_3" --format embedded     # <metadata> form
    keysig segments "Ab_3" --curve quadratic
    keysig verify a.codec.json b.codec.json
    keysig svg "Ab_3" --out-dir exports/
    keysig png "Ab_3" --out-dir exports/
    keysig layouts
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from .codec import (
    parse_codec_embedded,
    parse_codec_text,
    serialize_codec_embedded,
    serialize_codec_text,
    verify_provenance,
)
from .config import SUPERSAMPLE_SCALE, SignatureConfig
from .errors import KeysigError
from .keyboard import DEFAULT_LAYOUT, list_layouts, print_layout_stats
from .path import CurveMode, DashMode
from .render import extract_codec_from_svg, save_signature_png, signature_svg
from .signature import Signature, compute_signature

logger = logging.getLogger(__name__)

EXIT_ERROR = 2
EXIT_MISMATCH = 1


def _config_from_args(args: argparse.Namespace) -> SignatureConfig:
    return SignatureConfig.from_dict({
        "layout": args.layout,
        "curve_mode": args.curve,
        "dash_mode": args.dash,
    })


def _signature_from_args(args: argparse.Namespace) -> Signature:
    signature = compute_signature(args.name, _config_from_args(args))
    if signature.codec is None:
        raise KeysigError(f"{args.name!r} has fewer than two characters on the {args.layout} layout")
    return signature


def _output_stem(name: str) -> str:
    """File name stem for exports: the name with everything but letters, digits and underscore removed."""
    return re.sub(r"[^A-Za-z0-9_]", "", name)


def _load_codec(path: Path):
    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("<"):
        if "<svg" in text:
            return extract_codec_from_svg(text)
        return parse_codec_embedded(text)
    return parse_codec_text(text)


def cmd_codec(args: argparse.Namespace) -> None:
    signature = _signature_from_args(args)
    if args.format == "embedded":
        print(serialize_codec_embedded(signature.codec))
    else:
        sys.stdout.write(serialize_codec_text(signature.codec))


def cmd_segments(args: argparse.Namespace) -> None:
    signature = compute_signature(args.name, _config_from_args(args))

    print(f"=== {args.name} ({signature.config.layout_id}) ===")
    print(f"Resolved points: {len(signature.points)}")
    print(f"Segments       : {len(signature.segments)}")
    print("------------------------------")
    for i, s in enumerate(signature.segments):
        dash = s.style.dasharray or "solid"
        print(f"[{i}] {s.start.source_char} → {s.end.source_char}  {s.pair_class.value}")
        print(f"    direction = {s.direction}  length_bin = {s.length_bin}  length = {s.length:.1f}")
        print(f"    dash = {dash}  color = {s.style.color}")
        print(f"    d = {s.geometry.path_data()}")


def cmd_verify(args: argparse.Namespace) -> int:
    first = _load_codec(Path(args.first))
    second = _load_codec(Path(args.second))

    matched = first.matches(second)
    print(f"Layout    : {first.layout} / {second.layout}")
    print(f"Dash mode : {first.dash_mode.value} / {second.dash_mode.value}")
    print(f"Length    : {first.length} / {second.length}")
    print(f"Segments  : {len(first.segments)} / {len(second.segments)}")
    print(f"Hash      : {first.provenance_hash} / {second.provenance_hash}")
    if args.name is not None:
        for label, record in (("first", first), ("second", second)):
            ok = verify_provenance(record, args.name)
            print(f"Provenance ({label}): {'✓' if ok else '✗'}")
            matched = matched and ok
    print("MATCH" if matched else "MISMATCH")
    return 0 if matched else EXIT_MISMATCH


def cmd_svg(args: argparse.Namespace) -> None:
    signature = _signature_from_args(args)
    out_dir = Path(args.out_dir).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)

    svg_path = out_dir / f"{_output_stem(args.name)}-signature.svg"
    svg_path.write_text(signature_svg(signature, colored=args.colored), encoding="utf-8")
    codec_path = out_dir / f"{_output_stem(args.name)}-signature.codec.json"
    codec_path.write_text(serialize_codec_text(signature.codec), encoding="utf-8")

    print(f"✓ {svg_path}")
    print(f"✓ {codec_path}")


def cmd_png(args: argparse.Namespace) -> None:
    signature = _signature_from_args(args)
    out_dir = Path(args.out_dir).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)

    png_path = out_dir / f"{_output_stem(args.name)}-signature.png"
    save_signature_png(signature, png_path, scale=args.scale)
    print(f"✓ {png_path}")


def cmd_layouts(args: argparse.Namespace) -> None:
    for layout_id in list_layouts():
        print_layout_stats(layout_id)


def _add_signature_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("name", help="Text to sign (letters, digits, underscore)")
    p.add_argument("--layout", default=DEFAULT_LAYOUT, choices=list_layouts(),
                   help=f"Keyboard layout (default: {DEFAULT_LAYOUT})")
    p.add_argument("--curve", default=CurveMode.STRAIGHT.value, choices=[m.value for m in CurveMode],
                   help="Segment geometry (default: straight)")
    p.add_argument("--dash", default=DashMode.ALPHABET.value, choices=[m.value for m in DashMode],
                   help="Dash style selection (default: alphabet)")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="keysig",
        description="Keyboard-path signatures and their canonical codec",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_codec = sub.add_parser("codec", help="Print the codec record for a name")
    _add_signature_options(p_codec)
    p_codec.add_argument("--format", choices=["text", "embedded"], default="text",
                         help="Serialization form (default: text)")
    p_codec.set_defaults(func=cmd_codec)

    p_seg = sub.add_parser("segments", help="List the segments of a name's signature")
    _add_signature_options(p_seg)
    p_seg.set_defaults(func=cmd_segments)

    p_ver = sub.add_parser("verify", help="Compare two serialized codec records")
    p_ver.add_argument("first", help="Codec JSON, <metadata> element or SVG export")
    p_ver.add_argument("second", help="Codec JSON, <metadata> element or SVG export")
    p_ver.add_argument("--name", default=None, help="Also check both provenance hashes against this name")
    p_ver.set_defaults(func=cmd_verify)

    p_svg = sub.add_parser("svg", help="Write <name>-signature.svg and its codec JSON")
    _add_signature_options(p_svg)
    p_svg.add_argument("--out-dir", default=".", help="Output directory (default: .)")
    p_svg.add_argument("--colored", action="store_true", help="Stroke each segment with its own colour")
    p_svg.set_defaults(func=cmd_svg)

    p_png = sub.add_parser("png", help="Write <name>-signature.png")
    _add_signature_options(p_png)
    p_png.add_argument("--out-dir", default=".", help="Output directory (default: .)")
    p_png.add_argument("--scale", type=int, default=SUPERSAMPLE_SCALE,
                       help=f"Supersampling scale (default: {SUPERSAMPLE_SCALE})")
    p_png.set_defaults(func=cmd_png)

    p_lay = sub.add_parser("layouts", help="Describe the available keyboard layouts")
    p_lay.set_defaults(func=cmd_layouts)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        status = args.func(args)
    except (KeysigError, OSError) as e:
        logger.debug("command %s failed", args.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    return status or 0


if __name__ == "__main__":
    sys.exit(main())
