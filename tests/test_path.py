"""Tests for segment features, dash selection and curve geometry."""

import math

import pytest

from keysig.classify import PairClass
from keysig.errors import InvalidModeError
from keysig.keyboard import Position
from keysig.path import (
    DASH_CHOICES,
    LEGACY_DASHED,
    LEGACY_DOTTED,
    SOLID,
    CurveMode,
    DashMode,
    build_segments,
    direction_bucket,
    length_bin,
    segment_color,
    select_dash,
)
from keysig.stream import make_stream, signature_seed


@pytest.mark.parametrize(
    "dx, dy, expected",
    [
        (10, 0, 0),      # east
        (10, -10, 1),
        (0, -10, 2),     # up on screen
        (-10, -10, 3),
        (-10, 0, 4),
        (0, 10, 6),      # down on screen
        (10, 10, 7),
        (270, 60, 0),
        (15, 60, 6),
    ],
)
def test_direction_bucket(dx, dy, expected):
    assert direction_bucket(dx, dy) == expected


def test_direction_bucket_handles_negative_zero():
    assert direction_bucket(-10, 0.0) == 4
    assert direction_bucket(0, 0) == 0


@pytest.mark.parametrize(
    "length, expected",
    [
        (0.0, 0),
        (39.9, 0),
        (40.0, 1),
        (79.9, 1),
        (80.0, 2),
        (119.9, 2),
        (120.0, 3),
        (500.0, 3),
    ],
)
def test_length_bin_boundaries(length, expected):
    assert length_bin(length) == expected


def test_fewer_than_two_points_build_nothing(qwerty_points):
    assert build_segments([], seed="x") == []
    assert build_segments(qwerty_points("a"), seed="x") == []
    assert build_segments(qwerty_points("a!?"), seed="x") == []


def test_segment_count_is_points_minus_one(qwerty_points):
    points = qwerty_points("Hello_World42")
    segments = build_segments(points, seed="x")
    assert len(segments) == len(points) - 1
    for prev, seg in zip(segments, segments[1:]):
        assert prev.end == seg.start


def test_unresolved_characters_do_not_break_adjacency(qwerty_points):
    segments = build_segments(qwerty_points("a-b"), seed="x")
    assert len(segments) == 1
    assert (segments[0].start.source_char, segments[0].end.source_char) == ("a", "b")


def test_end_to_end_features(qwerty_points):
    segments = build_segments(qwerty_points("Ab_3"), seed=signature_seed("Ab_3", "qwerty"))

    assert [s.pair_class for s in segments] == [
        PairClass.UPPER_LOWER,
        PairClass.NUMERIC_OR_UNDERSCORE,
        PairClass.NUMERIC_OR_UNDERSCORE,
    ]
    assert [s.direction for s in segments] == [0, 1, 4]
    assert [s.length_bin for s in segments] == [3, 3, 3]
    assert segments[2].length == pytest.approx(480.0)


def test_neighbouring_keys_fall_in_the_second_length_bin(qwerty_points):
    (segment,) = build_segments(qwerty_points("as"), seed="x")
    assert segment.length == pytest.approx(60.0)
    assert segment.length_bin == 1
    assert segment.direction == 0


def test_legacy_dash_mode_is_deterministic_without_draws(qwerty_points):
    segments = build_segments(qwerty_points("Ab_3AB"), dash_mode=DashMode.LEGACY, seed="ignored")
    assert [s.style.dash for s in segments] == [
        LEGACY_DASHED,
        LEGACY_DOTTED,
        LEGACY_DOTTED,
        LEGACY_DOTTED,
        SOLID,
    ]


def test_legacy_select_dash_never_draws():
    def draw():
        raise AssertionError("legacy mode must not draw")

    for pair_class in PairClass:
        select_dash(pair_class, DashMode.LEGACY, draw)


def test_alphabet_mode_consumes_one_draw_per_segment_in_order(qwerty_points):
    seed = signature_seed("aBcD_9x", "qwerty")
    segments = build_segments(qwerty_points("aBcD_9x"), dash_mode=DashMode.ALPHABET, seed=seed)

    draw = make_stream(seed)
    for segment in segments:
        choices = DASH_CHOICES[segment.pair_class]
        expected = choices[math.floor(draw() * len(choices)) % len(choices)]
        assert segment.style.dash == expected


def test_alphabet_dash_stays_within_class_choices(qwerty_points):
    segments = build_segments(qwerty_points("QwErTy_123abcXYZ"), seed="some seed")
    for segment in segments:
        assert segment.style.dash in DASH_CHOICES[segment.pair_class]


def test_upper_upper_is_always_solid(qwerty_points):
    segments = build_segments(qwerty_points("QWERTY"), seed="another")
    assert all(s.style.is_solid for s in segments)
    assert all(s.style.dasharray is None for s in segments)


def test_select_dash_maps_a_full_draw_back_into_range():
    dash = select_dash(PairClass.LOWER_LOWER, DashMode.ALPHABET, lambda: 1.0)
    assert dash == DASH_CHOICES[PairClass.LOWER_LOWER][0]


def test_color_is_deterministic_and_clamped():
    assert segment_color("a", "b", PairClass.LOWER_LOWER, 60.0) == segment_color("a", "b", PairClass.LOWER_LOWER, 60.0)

    hue, sat, light = segment_color("a", "b", PairClass.LOWER_LOWER, 10_000.0)
    assert 0 <= hue < 360
    assert sat == pytest.approx(55.0 + 8.0)
    assert light == pytest.approx(64.0 - 4.0)

    _, sat, _ = segment_color("a", "b", PairClass.LOWER_LOWER, 0.0)
    assert sat == pytest.approx(55.0 - 6.0)


def test_straight_geometry(qwerty_points):
    (segment,) = build_segments(qwerty_points("as"), curve_mode=CurveMode.STRAIGHT, seed="x")
    assert segment.geometry.kind == "line"
    assert segment.geometry.path_data() == "M 91 162 L 151 162"


def test_quadratic_bends_perpendicular_to_the_segment(qwerty_points):
    (segment,) = build_segments(qwerty_points("as"), curve_mode=CurveMode.QUADRATIC, seed="x")
    (control,) = segment.geometry.controls
    assert segment.geometry.kind == "quadratic"
    assert control == Position(121.0, 174.0)
    assert segment.geometry.path_data() == "M 91 162 Q 121 174 151 162"


def test_quadratic_bend_follows_the_turn(qwerty_points):
    left = build_segments(qwerty_points("asw"), curve_mode=CurveMode.QUADRATIC, seed="x")
    right = build_segments(qwerty_points("asx"), curve_mode=CurveMode.QUADRATIC, seed="x")

    def side(segment):
        a, control, b = segment.geometry.points
        return math.copysign(1.0, (b.x - a.x) * (control.y - a.y) - (b.y - a.y) * (control.x - a.x))

    assert side(left[1]) != side(right[1])


def test_catmull_rom_clamps_at_path_ends(qwerty_points):
    (segment,) = build_segments(qwerty_points("as"), curve_mode=CurveMode.CATMULL_ROM, seed="x")
    start, c1, c2, end = segment.geometry.points

    assert segment.geometry.kind == "cubic"
    assert (start, end) == (Position(91.0, 162.0), Position(151.0, 162.0))
    assert c1.y == pytest.approx(162.0)
    assert c2.y == pytest.approx(162.0)
    assert 91.0 < c1.x < c2.x < 151.0
    assert c1.x + c2.x == pytest.approx(242.0)


def test_catmull_rom_uses_neighbours(qwerty_points):
    segments = build_segments(qwerty_points("qasw"), curve_mode=CurveMode.CATMULL_ROM, seed="x")
    middle = segments[1]
    assert middle.geometry.start == segments[0].geometry.end
    # the neighbours above the row pull the interior controls off the line
    assert any(c.y != pytest.approx(162.0) for c in middle.geometry.controls)


@pytest.mark.parametrize("curve_mode", list(CurveMode))
def test_repeated_keys_produce_finite_geometry(qwerty_points, curve_mode):
    segments = build_segments(qwerty_points("aaa"), curve_mode=curve_mode, seed="x")
    assert len(segments) == 2
    for segment in segments:
        assert segment.length == 0.0
        assert segment.length_bin == 0
        for p in segment.geometry.points:
            assert math.isfinite(p.x) and math.isfinite(p.y)


def test_features_do_not_depend_on_curve_mode(qwerty_points):
    points = qwerty_points("Keyboard_Sig9")
    builds = [build_segments(points, curve_mode=mode, seed="s") for mode in CurveMode]
    features = [[(s.pair_class, s.direction, s.length_bin, s.style.dash) for s in b] for b in builds]
    assert features[0] == features[1] == features[2]


def test_mode_strings_are_accepted_and_validated(qwerty_points):
    segments = build_segments(qwerty_points("ab"), curve_mode="quadratic", dash_mode="legacy", seed="x")
    assert segments[0].geometry.kind == "quadratic"

    with pytest.raises(InvalidModeError):
        build_segments(qwerty_points("ab"), curve_mode="bezier")
    with pytest.raises(ValueError):
        build_segments(qwerty_points("ab"), dash_mode="random")
