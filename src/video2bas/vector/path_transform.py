"""Vertical flip of SVG path data.

Traced outlines use a y-up coordinate system; the animation script expects
y-down. ``flip_path`` rewrites every Y value of a path as ``H - y``
(absolute commands) or ``-dy`` (relative commands) and leaves X values,
radii, rotations and flags alone.

Parameter arity per command (values per group):

    =========  =====  ==================================
    command    arity  Y slots inside a group
    =========  =====  ==================================
    H h        1      none
    V v        1      0
    M m L l    2      1
    T t        2      1
    S s Q q    4      1, 3
    C c        6      1, 3, 5
    A a        7      6
    Z z        0      none
    =========  =====  ==================================

A letter may be followed by several groups; each group is flipped with the
letter's own case. Separators are copied verbatim and every number is
written in its shortest round-trip form, so ``"M10 20 L30.0 40"`` with
``H = 100`` becomes ``"M10 80 L30 60"``.
"""

import logging
import re
from typing import Iterator, List, Tuple

from video2bas.contracts import InvalidInput

__all__ = [
    'DEFAULT_VIEWBOX_WIDTH',
    'DEFAULT_VIEWBOX_HEIGHT',
    'COMMAND_ARITY',
    'tokenize_path',
    'format_number',
    'flip_path',
]

logger = logging.getLogger(__name__)

DEFAULT_VIEWBOX_WIDTH = 4000
DEFAULT_VIEWBOX_HEIGHT = 3620

COMMAND_ARITY = {
    "H": 1, "V": 1,
    "M": 2, "L": 2, "T": 2,
    "S": 4, "Q": 4,
    "C": 6,
    "A": 7,
    "Z": 0,
}

NUMBER = "number"
COMMAND = "command"
SEPARATOR = "separator"
MALFORMED = "malformed"

TOKEN_RE = re.compile(
    r"(?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<command>[MLHVCSQTAZmlhvcsqtaz])"
    r"|(?P<separator>[\s,]+)"
    r"|(?P<malformed>.)",
    re.DOTALL,
)


def tokenize_path(d: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(kind, text)`` tokens for path data.

    ``kind`` is one of ``number``, ``command``, ``separator`` or
    ``malformed``. Consecutive malformed characters are merged into one token.
    """
    pending = []
    for match in TOKEN_RE.finditer(d):
        kind = match.lastgroup
        if kind == MALFORMED:
            pending.append(match.group())
            continue
        if pending:
            yield MALFORMED, "".join(pending)
            pending = []
        yield kind, match.group()
    if pending:
        yield MALFORMED, "".join(pending)


def format_number(value: float) -> str:
    """Shortest round-trip decimal text for ``value``.

    Integral values print without a fractional part; ``repr`` handles the
    rest and switches to exponent notation only for extreme magnitudes.
    """
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _parse_number(kind: str, text: str, strict: bool) -> float:
    if kind == NUMBER:
        return float(text)
    if strict:
        raise InvalidInput(f"malformed number in path data: {text!r}", stage="generate")
    logger.debug("Malformed path number %r treated as 0", text)
    return 0.0


def _y_slots(command: str, group_len: int) -> List[int]:
    """Indices of Y values inside one parameter group of ``command``."""
    upper = command.upper()
    if upper == "V":
        return [0] if group_len >= 1 else []
    if upper == "A":
        return [6] if group_len >= 7 else []
    if upper in ("H", "Z"):
        return []
    return [i for i in range(1, group_len, 2)]


class _Param:
    """One numeric parameter awaiting output."""
    __slots__ = ("value",)

    def __init__(self, value: float):
        self.value = value


def flip_path(d: str, height: float, strict: bool = False) -> str:
    """Flip the Y axis of SVG path data.

    Parameters
    ----------
    d : str
        Path data, e.g. ``"M10 20 L30 40 Z"``.
    height : float
        Vertical extent ``H``. A height of 0 falls back to
        ``DEFAULT_VIEWBOX_HEIGHT``.
    strict : bool, optional
        If True, malformed numeric tokens raise ``InvalidInput`` instead of
        being read as 0.

    Returns
    -------
    str
        Path data with Y values replaced by ``H - y`` (absolute) or ``-dy``
        (relative). Command letters and separators are preserved; every
        number is rewritten in its shortest round-trip form.

    Examples
    --------
    >>> flip_path("M10 20 L30 40", 100)
    'M10 80 L30 60'
    >>> flip_path("v 15", 100)
    'v -15'
    """
    if not height:
        height = DEFAULT_VIEWBOX_HEIGHT

    # Pass 1: tokenize and collect parameters per command
    items = []          # sequence of str (verbatim) or _Param
    command = None
    params: List[_Param] = []

    def flush():
        if not params:
            return
        arity = COMMAND_ARITY.get(command.upper(), 0) if command else 0
        if arity > 0:
            absolute = command.isupper()
            for start in range(0, len(params), arity):
                group = params[start:start + arity]
                for slot in _y_slots(command, len(group)):
                    p = group[slot]
                    p.value = height - p.value if absolute else -p.value
        params.clear()

    for kind, text in tokenize_path(d):
        if kind == COMMAND:
            flush()
            command = text
            items.append(text)
        elif kind == SEPARATOR:
            items.append(text)
        else:
            param = _Param(_parse_number(kind, text, strict))
            params.append(param)
            items.append(param)
    flush()

    # Pass 2: render, keeping adjacent numbers apart
    out = []
    previous_was_number = False
    for item in items:
        if isinstance(item, _Param):
            if previous_was_number:
                out.append(" ")
            out.append(format_number(item.value))
            previous_was_number = True
        else:
            out.append(item)
            previous_was_number = False
    return "".join(out)
