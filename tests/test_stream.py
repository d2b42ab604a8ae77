"""Tests for the FNV-1a hash and the seeded xorshift stream."""

import pytest

from keysig import stream
from keysig.stream import fnv1a32, hash_hex, make_stream, utf16_code_units, xorshift32


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", 0x811C9DC5),
        ("a", 0xE40C292C),
        ("foobar", 0xBF9CF968),
    ],
)
def test_fnv1a32_known_vectors(text, expected):
    assert fnv1a32(text) == expected


def test_hash_hex_is_eight_lowercase_digits():
    assert hash_hex("a") == "e40c292c"
    assert len(hash_hex("qwerty|ab_3")) == 8


def test_astral_characters_hash_as_surrogate_pairs():
    assert utf16_code_units("\U0001F600").tolist() == [0xD83D, 0xDE00]
    assert fnv1a32("\U0001F600") != fnv1a32("\U0001F601")


def test_xorshift32_step():
    assert xorshift32(1) == 270369
    assert xorshift32(0) == 0


def test_stream_is_deterministic():
    first = make_stream("seedA")
    second = make_stream("seedA")
    a = [first() for _ in range(50)]
    b = [second() for _ in range(50)]
    assert a == b
    assert all(0.0 <= v <= 1.0 for v in a)


def test_distinct_seeds_give_distinct_sequences():
    first = make_stream("seedA")
    second = make_stream("seedB")
    assert [first() for _ in range(8)] != [second() for _ in range(8)]


def test_zero_hash_seed_is_replaced(monkeypatch):
    monkeypatch.setattr(stream, "fnv1a32", lambda text: 0)
    draw = make_stream("anything")
    assert draw() == pytest.approx(270369 / 0xFFFFFFFF)
    assert any(draw() > 0 for _ in range(10))
