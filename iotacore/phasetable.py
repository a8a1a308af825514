"""Phase correction arrays looked up by sensor model in the tables file."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .config import InputChannel

P50_KEY = '"p50":'
P60_KEY = '"p60":'
_ARRAY_TEXT_LIMIT = 100
_NUMBER = re.compile(
    r"\s*[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"
)

PhaseArrays = tuple[Optional[list[int]], Optional[list[int]]]


def parse_phase_array(text: str) -> Optional[list[int]]:
    """Parse the first ``[...]`` array in ``text`` into hundredths of a degree.

    Each value is scaled by 100 and rounded up from one half. At most 100
    characters of the array are read. Returns None if there is no ``[``.
    """
    start = text.find("[")
    if start < 0:
        return None
    body = text[start + 1:start + 1 + _ARRAY_TEXT_LIMIT]
    close = body.find("]")
    if close >= 0:
        body = body[:close]

    values: list[int] = []
    pos = 0
    while pos < len(body):
        match = _NUMBER.match(body, pos)
        number = 0.0
        if match:
            number = float(match.group())
            pos = match.end()
        values.append(int(number * 100 + 0.5))
        comma = body.find(",", pos)
        if comma < 0:
            break
        pos = comma + 1
    return values


def _find_until(text: str, start: int, target: str, terminator: str = "}") -> int:
    """Return the position just past ``target`` if it occurs before ``terminator``, else -1."""
    found = text.find(target, start)
    if found < 0:
        return -1
    stop = text.find(terminator, start)
    if 0 <= stop < found + len(target) - 1:
        return -1
    return found + len(target)


def find_phase_arrays(table_text: str, model: Optional[str]) -> PhaseArrays:
    """Return the (p50, p60) arrays the tables text gives for ``model``.

    The model is located by its first occurrence; each key must then appear
    before the closing brace of the model's entry. Missing arrays are None.
    """
    if not model:
        return None, None
    found = table_text.find(model)
    if found < 0:
        return None, None
    after_model = found + len(model)

    arrays: list[Optional[list[int]]] = []
    for key in (P50_KEY, P60_KEY):
        position = _find_until(table_text, after_model, key)
        arrays.append(parse_phase_array(table_text[position:]) if position >= 0 else None)
    return arrays[0], arrays[1]


def assign_phase_arrays(channels: Sequence[InputChannel], table_text: str) -> dict[str, PhaseArrays]:
    """Set ``p50`` and ``p60`` on every channel from the tables text.

    Channels of the same model share the same array objects. Inactive
    channels are cleared. Returns the arrays found for each active model.
    """
    models: dict[str, PhaseArrays] = {}
    for channel in channels:
        if channel.active and channel.model is not None and channel.model not in models:
            models[channel.model] = find_phase_arrays(table_text, channel.model)

    for channel in channels:
        channel.p50 = None
        channel.p60 = None
        if channel.active and channel.model in models:
            channel.p50, channel.p60 = models[channel.model]
    return models