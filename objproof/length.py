"""Length policy — turns targets and free-text directives into a LengthConfig."""

import math
import re

from objproof.config import get_config
from objproof.errors import InvalidRequestError
from objproof.models import LengthConfig, TargetWindow, count_words

__all__ = [
    "calculate_length_config",
    "count_words",
    "parse_target_length",
    "resolve_target_window",
]

# Tolerance applied around a single target number.
WINDOW_TOLERANCE = 0.1

_NUMBER = r"(\d{1,3}(?:,\d{3})+|\d+(?:\.\d+)?)\s*(k)?"
_RANGE_RE = re.compile(
    rf"(?:between\s+)?{_NUMBER}\s*(?:-|–|to|and)\s*{_NUMBER}\s*words",
    re.IGNORECASE,
)
_SINGLE_RE = re.compile(rf"{_NUMBER}\s*words", re.IGNORECASE)

_COMPRESS_HINTS = ("condense", "shorten", "shorter", "trim", "compress", "tighten")
_EXPAND_HINTS = ("expand", "elaborate", "lengthen", "longer", "flesh out")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _to_words(number: str, thousands: str | None) -> int:
    value = float(number.replace(",", ""))
    if thousands:
        value *= 1000
    return _round_half_up(value)


def parse_target_length(instructions: str | None) -> TargetWindow | None:
    """Find a word-count directive in free-text instructions.

    Ranges ("between 900 and 1,100 words", "2k-3k words") are taken as-is;
    a single number ("about 1200 words") gets a ±10% window.
    """
    if not instructions:
        return None

    match = _RANGE_RE.search(instructions)
    if match:
        low = _to_words(match.group(1), match.group(2))
        high = _to_words(match.group(3), match.group(4))
        return TargetWindow(target_min=min(low, high), target_max=max(low, high))

    match = _SINGLE_RE.search(instructions)
    if match:
        target = _to_words(match.group(1), match.group(2))
        return TargetWindow(
            target_min=_round_half_up(target * (1 - WINDOW_TOLERANCE)),
            target_max=_round_half_up(target * (1 + WINDOW_TOLERANCE)),
        )
    return None


def resolve_target_window(
    target_word_count: int | None,
    custom_instructions: str | None,
    parse=parse_target_length,
) -> tuple[int | None, int | None]:
    """Resolve (target_min, target_max) from an explicit target or the instructions.

    An explicit target wins over any directive in the instructions. Returns
    ``(None, None)`` when neither yields a window.
    """
    if target_word_count:
        return (
            _round_half_up(target_word_count * (1 - WINDOW_TOLERANCE)),
            _round_half_up(target_word_count * (1 + WINDOW_TOLERANCE)),
        )
    parsed = parse(custom_instructions)
    if parsed:
        return parsed.target_min, parsed.target_max
    return None, None


def _hinted_ratio(instructions: str | None) -> float:
    text = (instructions or "").lower()
    if any(hint in text for hint in _COMPRESS_HINTS):
        return 0.7
    if any(hint in text for hint in _EXPAND_HINTS):
        return 1.5
    return 1.0


def _length_mode(ratio: float) -> str:
    if ratio < 0.5:
        return "heavy_compression"
    if ratio < 0.8:
        return "moderate_compression"
    if ratio <= 1.2:
        return "maintain"
    if ratio <= 1.8:
        return "moderate_expansion"
    return "heavy_expansion"


def calculate_length_config(
    input_words: int,
    target_min: int | None = None,
    target_max: int | None = None,
    instructions: str | None = None,
) -> LengthConfig:
    """Compute the length configuration for one run.

    Without a window, the instructions' compress/expand wording (if any)
    scales the input size and a ±10% window is placed around it. With only
    one bound, that bound is treated as the midpoint.

    Raises InvalidRequestError on non-positive or inverted bounds.
    """
    if target_min is None and target_max is None:
        mid = max(1, _round_half_up(input_words * _hinted_ratio(instructions)))
        target_min = _round_half_up(mid * (1 - WINDOW_TOLERANCE))
        target_max = _round_half_up(mid * (1 + WINDOW_TOLERANCE))
    elif target_min is None or target_max is None:
        mid = target_min if target_min is not None else target_max
        target_min = _round_half_up(mid * (1 - WINDOW_TOLERANCE))
        target_max = _round_half_up(mid * (1 + WINDOW_TOLERANCE))

    if target_min <= 0 or target_max < target_min:
        raise InvalidRequestError(
            f"Inconsistent target bounds: min={target_min}, max={target_max}."
        )

    target_mid = _round_half_up((target_min + target_max) / 2)
    ratio = target_mid / input_words if input_words else 1.0
    chunk_size = get_config().get("target_chunk_words", 800)

    return LengthConfig(
        target_min=target_min,
        target_max=target_max,
        target_mid=target_mid,
        length_ratio=round(ratio, 3),
        length_mode=_length_mode(ratio),
        chunk_target_words=max(1, _round_half_up(chunk_size * ratio)),
    )
