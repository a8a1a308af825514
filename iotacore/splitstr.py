"""Split a delimited line into trimmed fields."""

from __future__ import annotations


def split_line(line: str, sepchar: str = ",", endchar: str = "\0") -> list[str]:
    """Split ``line`` up to ``endchar`` on ``sepchar``, trimming spaces from each field.

    With the default end character the whole line is used. If another end
    character is given and not found, no fields are returned.
    """
    end = line.find(endchar)
    if end < 0:
        if endchar != "\0":
            return []
        end = len(line)
    return [field.strip(" ") for field in line[:end].split(sepchar)]