"""Deterministic target images the population is evolved toward."""

import enum
import logging
import math
from typing import Callable, Dict, Union

from ib.types import ColorUnit, TargetPattern

logger = logging.getLogger(__name__)


class PatternKind(str, enum.Enum):
    GRADIENT = 'gradient'
    CIRCLE = 'circle'
    CHECKERBOARD = 'checkerboard'
    STRIPES = 'stripes'


def _gradient(x: int, y: int, width: int, height: int) -> ColorUnit:
    # red grows horizontally, green vertically, blue along the diagonal
    return ColorUnit(
        r=x * 255 // max(width - 1, 1),
        g=y * 255 // max(height - 1, 1),
        b=(x + y) * 255 // max(width + height - 2, 1),
    )


def _circle(x: int, y: int, width: int, height: int) -> ColorUnit:
    center_x, center_y = width / 2, height / 2
    radius = min(width, height) * 10 / 32
    if math.hypot(x - center_x, y - center_y) <= radius:
        return ColorUnit(r=255, g=100, b=100)
    return ColorUnit(r=50, g=50, b=150)


def _checkerboard(x: int, y: int, width: int, height: int) -> ColorUnit:
    if (x // 4 + y // 4) % 2 == 0:
        return ColorUnit(r=255, g=255, b=255)
    return ColorUnit(r=0, g=0, b=0)


def _stripes(x: int, y: int, width: int, height: int) -> ColorUnit:
    if x % 8 < 4:
        return ColorUnit(r=255, g=0, b=0)
    return ColorUnit(r=255, g=255, b=0)


PATTERNS: Dict[PatternKind, Callable[[int, int, int, int], ColorUnit]] = {
    PatternKind.GRADIENT: _gradient,
    PatternKind.CIRCLE: _circle,
    PatternKind.CHECKERBOARD: _checkerboard,
    PatternKind.STRIPES: _stripes,
}

# numbering of the interactive menu the patterns were originally picked from
MENU = {
    '1': PatternKind.GRADIENT,
    '2': PatternKind.CIRCLE,
    '3': PatternKind.CHECKERBOARD,
    '4': PatternKind.STRIPES,
}


def parse_pattern_choice(choice: Union[str, PatternKind]) -> PatternKind:
    """Resolve a pattern name or menu number, falling back to the gradient."""
    if isinstance(choice, PatternKind):
        return choice
    value = str(choice).strip().lower()
    if value in MENU:
        return MENU[value]
    try:
        return PatternKind(value)
    except ValueError:
        logger.warning(f"Unknown target pattern {choice!r}, using {PatternKind.GRADIENT.value}.")
        return PatternKind.GRADIENT


def render_target_pattern(kind: Union[str, PatternKind], width: int = 32, height: int = 32) -> TargetPattern:
    """Render a target pattern into a row-major grid.

    Args:
        kind: a `PatternKind`, its name, or its menu number.
        width, height (int): grid dimensions.

    Returns:
        TargetPattern: the grid and its label. Same arguments, same grid.
    """
    kind = parse_pattern_choice(kind)
    draw = PATTERNS[kind]
    pixels = [draw(x, y, width, height) for y in range(height) for x in range(width)]
    return TargetPattern(label=kind.value, width=width, height=height, pixels=pixels)
