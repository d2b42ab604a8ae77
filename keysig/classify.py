"""Case/digit classification of consecutive character pairs."""

from enum import Enum


class PairClass(str, Enum):
    UPPER_UPPER = "UpperUpper"
    UPPER_LOWER = "UpperLower"
    LOWER_UPPER = "LowerUpper"
    LOWER_LOWER = "LowerLower"
    NUMERIC_OR_UNDERSCORE = "NumericOrUnderscore"


def is_numeric_or_underscore(ch: str) -> bool:
    return ch == "_" or "0" <= ch <= "9"


def is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def classify(a: str, b: str) -> PairClass:
    """
    Classify the ordered pair (a, b).

    Digits and underscore win over letter case on either side; for two letters
    the class records the case of each side in order.
    """
    if is_numeric_or_underscore(a) or is_numeric_or_underscore(b):
        return PairClass.NUMERIC_OR_UNDERSCORE
    if is_upper(a) and is_upper(b):
        return PairClass.UPPER_UPPER
    if is_lower(a) and is_lower(b):
        return PairClass.LOWER_LOWER
    if is_upper(a) and is_lower(b):
        return PairClass.UPPER_LOWER
    return PairClass.LOWER_UPPER
