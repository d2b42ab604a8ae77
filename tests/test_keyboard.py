"""Tests for layout tables, canvas projection and character resolution."""

import pytest

from keysig.errors import UnknownLayoutError
from keysig.keyboard import (
    LAYOUTS,
    CanvasGeometry,
    Position,
    active_keys,
    current_key,
    get_layout,
    layout_bounds,
    list_layouts,
    resolve,
    resolve_all,
)


@pytest.mark.parametrize(
    "char, expected",
    [
        ("A", Position(0.75, 1.0)),
        ("a", Position(0.75, 1.0)),
        ("Q", Position(0.5, 0.0)),
        ("p", Position(9.5, 0.0)),
        ("m", Position(7.25, 2.0)),
        ("1", Position(0.0, -1.0)),
        ("0", Position(9.0, -1.0)),
        ("_", Position(10.0, -1.0)),
    ],
)
def test_qwerty_positions(char, expected):
    assert resolve("qwerty", char) == expected


@pytest.mark.parametrize("char", ["!", " ", "-", "é", "", "ab"])
def test_unsupported_characters_do_not_resolve(char):
    assert resolve("qwerty", char) is None


def test_letter_case_shares_one_position():
    for upper in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
        assert resolve("qwerty", upper) == resolve("qwerty", upper.lower())


def test_dvorak_places_letters_at_dvorak_columns():
    assert resolve("dvorak", "o") == Position(1.75, 1.0)
    assert resolve("dvorak", "P") == Position(3.5, 0.0)
    assert resolve("dvorak", "z") == Position(10.25, 2.0)
    assert resolve("dvorak", "'") is None
    assert resolve("dvorak", ",") is None


def test_every_layout_covers_the_full_alphabet():
    for layout_id in list_layouts():
        layout = get_layout(layout_id)
        assert len(layout.keys) == 26 + 10 + 1


def test_unknown_layout_raises_key_error():
    with pytest.raises(UnknownLayoutError) as excinfo:
        resolve("colemak", "a")
    assert isinstance(excinfo.value, KeyError)
    assert "colemak" in str(excinfo.value)


def test_layout_table_is_immutable():
    with pytest.raises(TypeError):
        LAYOUTS["custom"] = LAYOUTS["qwerty"]
    with pytest.raises(TypeError):
        LAYOUTS["qwerty"].keys["A"] = LAYOUTS["qwerty"].keys["B"]


def test_qwerty_bounds_and_canvas():
    assert layout_bounds("qwerty") == (0.0, -1.0, 10.0, 2.0)

    canvas = CanvasGeometry.for_layout(get_layout("qwerty"))
    assert canvas.shift_x == 0.0
    assert canvas.shift_y == 60.0
    assert canvas.width == pytest.approx(692.0)
    assert canvas.height == pytest.approx(264.0)


def test_resolve_all_projects_to_key_centers():
    points = resolve_all("A", "qwerty")
    assert len(points) == 1
    assert points[0].source_char == "A"
    assert points[0].position == Position(91.0, 162.0)


def test_resolve_all_skips_unresolved_characters():
    points = resolve_all("A!b c", "qwerty")
    assert [p.source_char for p in points] == ["A", "b", "c"]


def test_resolve_all_of_unsupported_name_is_empty():
    assert resolve_all("!?.-", "qwerty") == []
    assert resolve_all("", "qwerty") == []


def test_active_and_current_keys():
    assert active_keys("Aab1!") == frozenset({"A", "B", "1"})
    assert current_key("ab") == "B"
    assert current_key("a!") is None
    assert current_key("") is None
