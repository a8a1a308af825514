"""General helpers: string comparison, hashing, hex/base64, JSON locators and dates."""

from __future__ import annotations

import base64
import hashlib
import shutil
from pathlib import Path
from typing import IO, Iterable, Sequence

_HEXCODES = "0123456789ABCDEF"
_WHITESPACE = frozenset(" \t\n\v\f\r")
_MONTH_TO_DATE = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334, 365)
_MONTH_TO_LEAP_DATE = (0, 31, 60, 91, 121, 152, 182, 213, 244, 274, 305, 335, 366)
_FORMAT_CHARS = "YMDhms"
DEFAULT_DATE_FORMAT = "MM/DD/YY hh:mm:ss"


def strcmp_ci(str1: str, str2: str) -> int:
    """Compare two strings ignoring case; return -1, 0 or +1 like strcmp."""
    length = max(len(str1), len(str2))
    for a, b in zip(str1.ljust(length, "\0"), str2.ljust(length, "\0")):
        if a == b:
            continue
        ua, ub = a.upper(), b.upper()
        if ua > ub:
            return 1
        if ua < ub:
            return -1
    return 0


def hash_name(name: str) -> str:
    """Hash a name to an eight character base64 string."""
    digest = hashlib.sha256(name.encode()).digest()[:6]
    return base64encode(digest)


def format_hex(data: int) -> str:
    """Format a 32-bit value as eight hex digits."""
    value = data & 0xFFFFFFFF
    digits = []
    for _ in range(8):
        digits.append(_HEXCODES[value % 16])
        value //= 16
    return "".join(reversed(digits))


def bin2hex(data: bytes) -> str:
    """Convert bytes to a string of hex digits, two per byte."""
    return "".join(_HEXCODES[b >> 4] + _HEXCODES[b & 0x0F] for b in data)


def hex2bin(text: str) -> bytes:
    """Convert a string of hex digit pairs back to bytes."""
    if len(text) % 2:
        raise ValueError("hex string must have an even number of digits")
    out = bytearray()
    upper = text.upper()
    for high, low in zip(upper[0::2], upper[1::2]):
        hi, lo = _HEXCODES.find(high), _HEXCODES.find(low)
        if hi < 0 or lo < 0:
            raise ValueError(f"invalid hex digits {high}{low!r}")
        out.append(hi * 16 + lo)
    return bytes(out)


def base64encode(data: bytes) -> str:
    """Encode bytes as padded base64 text; empty input gives an empty string."""
    if not data:
        return ""
    return base64.b64encode(bytes(data)).decode("ascii")


def _read_text(stream: IO) -> tuple[int, str]:
    start = stream.tell()
    content = stream.read()
    if isinstance(content, (bytes, bytearray)):
        content = content.decode("latin-1")
    return start, content


def json_summary(stream: IO, depth: int) -> str:
    """Summarise JSON from a stream to the given depth.

    Objects or arrays nested at ``depth`` are replaced by ``[position,length]``
    locators giving their offset in the stream and condensed length.
    """
    start, content = _read_text(stream)
    level = -1
    delims: list[str] = []
    in_string = False
    escape = False
    var_beg = 0
    var_len = 0
    out: list[str] = []

    for offset, char in enumerate(content):
        if escape:
            var_len += 1
            escape = False
        else:
            var_len += 1
            if in_string:
                if char == '"':
                    in_string = False
                elif char == "\\":
                    escape = True
            elif char in _WHITESPACE:
                var_len -= 1
                continue
            elif char == '"':
                in_string = True
            elif char in "{[":
                level += 1
                closer = "}" if char == "{" else "]"
                del delims[level:]
                delims.append(closer)
                if level == depth:
                    var_beg = start + offset
                    var_len = 0
            elif level >= 0 and char == delims[level]:
                level -= 1
                if level == depth - 1:
                    out.append(f"[{var_beg},{var_len + 1}")
                    char = "]"
        if level < depth:
            out.append(char)
        if level < 0:
            break
    return "".join(out)


def json_detail(stream: IO, locator: Sequence[int]) -> str:
    """Read the condensed JSON segment that a summary locator points to."""
    position, length = int(locator[0]), int(locator[1])
    stream.seek(position)
    in_string = False
    escape = False
    out: list[str] = []
    while len(out) < length:
        chunk = stream.read(1)
        if not chunk:
            raise ValueError("JSON segment extends past end of stream")
        char = chunk.decode("latin-1") if isinstance(chunk, (bytes, bytearray)) else chunk
        if not in_string and char in _WHITESPACE:
            continue
        if escape:
            escape = False
        elif in_string:
            if char == '"':
                in_string = False
            elif char == "\\":
                escape = True
        elif char == '"':
            in_string = True
        out.append(char)
    return "".join(out)


def unixtime(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> int:
    """Convert a date and time to unix time; return 0 if any field is out of range."""
    if (
        year < 1970
        or not 1 <= month <= 12
        or not 1 <= day <= 31
        or not 0 <= hour <= 23
        or not 0 <= minute <= 59
        or not 0 <= second <= 59
    ):
        return 0
    days = (year - 1970) * 365 + (year - 1969) // 4
    days += _MONTH_TO_DATE[month - 1] + (day - 1) + (1 if year % 4 == 0 and month > 2 else 0)
    return (days * 86400 + hour * 3600 + minute * 60 + second) & 0xFFFFFFFF


def _date_fields(unix_time: int) -> dict[str, int]:
    unix_time &= 0xFFFFFFFF
    daytime = unix_time % 86400
    days = unix_time // 86400 + 365
    year = 4 * (days // 1461) + 1969
    days %= 1461
    if days < 1095:
        year += days // 365
        days %= 365
        table = _MONTH_TO_DATE
    else:
        year += 3
        days -= 1095
        table = _MONTH_TO_LEAP_DATE
    month = next(m for m in range(1, 13) if days < table[m])
    return {
        "Y": year,
        "M": month,
        "D": days - table[month - 1] + 1,
        "h": daytime // 3600,
        "m": (daytime % 3600) // 60,
        "s": daytime % 60,
    }


def datef(unix_time: int, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    """Format unix time with a pattern built from runs of Y, M, D, h, m and s."""
    values = _date_fields(unix_time)
    out: list[str] = []
    pos = 0
    while pos < len(fmt):
        char = fmt[pos]
        if char not in _FORMAT_CHARS:
            out.append(char)
            pos += 1
            continue
        run = 1
        while pos + run < len(fmt) and fmt[pos + run] == char:
            run += 1
        value = values[char]
        if run == 1:
            out.append(str(value % 100))
        elif run == 2:
            out.append(f"{value % 100:02d}")
        else:
            out.append(f"{value:0{run}d}")
        pos += run
    return "".join(out)


def _scan_int(text: str, pos: int, width: int) -> tuple[int, int] | None:
    """Read an integer the way a scanf %<width>d conversion does."""
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    end = pos
    limit = pos + width
    if end < min(limit, len(text)) and text[end] in "+-":
        end += 1
    digits_start = end
    while end < min(limit, len(text)) and text[end].isdigit():
        end += 1
    if end == digits_start:
        return None
    return int(text[pos:end]), end


def yyyymmdd_to_unixtime(text: str) -> int:
    """Convert a YYYYMMDD string to unix time; return 0 if it cannot be read."""
    fields = []
    pos = 0
    for width in (4, 2, 2):
        scanned = _scan_int(text, pos, width)
        if scanned is None:
            return 0
        value, pos = scanned
        fields.append(value)
    return unixtime(*fields)


def hhmmss_to_daytime(text: str) -> int:
    """Convert "hh:mm:ss" (minutes and seconds optional) to seconds of day, or -1."""
    fields = [0, 0, 0]
    pos = 0
    matched = 0
    for index in range(3):
        if index:
            if pos >= len(text) or text[pos] != ":":
                break
            pos += 1
        scanned = _scan_int(text, pos, 2)
        if scanned is None:
            break
        fields[index], pos = scanned
        matched += 1
    if not matched:
        return -1
    hour, minute, second = fields
    return hour * 3600 + minute * 60 + second


def hash_file(stream: IO) -> bytes:
    """Return the SHA-256 digest of a whole stream, leaving its position unchanged."""
    position = stream.tell()
    stream.seek(0)
    sha = hashlib.sha256()
    for chunk in iter(lambda: stream.read(256), b"" if _is_binary(stream) else ""):
        sha.update(chunk if isinstance(chunk, (bytes, bytearray)) else chunk.encode())
    stream.seek(position)
    return sha.digest()


def _is_binary(stream: IO) -> bool:
    position = stream.tell()
    probe = stream.read(0)
    stream.seek(position)
    return isinstance(probe, (bytes, bytearray))


def copy_file(dest: str | Path, source: str | Path) -> bool:
    """Copy source to dest, replacing dest; return False if either cannot be opened."""
    source_path, dest_path = Path(source), Path(dest)
    if not source_path.is_file():
        return False
    try:
        if dest_path.exists():
            dest_path.unlink()
        with source_path.open("rb") as infile, dest_path.open("wb") as outfile:
            shutil.copyfileobj(infile, outfile, 512)
    except OSError:
        return False
    return True


def _strtol(text: str, pos: int) -> tuple[int, int]:
    start = pos
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    end = pos
    if end < len(text) and text[end] in "+-":
        end += 1
    digits_start = end
    while end < len(text) and text[end].isdigit():
        end += 1
    if end == digits_start:
        return 0, start
    return int(text[pos:end]), end


def parse_semantic_version(text: str | None) -> int:
    """Pack "major.minor.patch" (dots or underscores) into one integer; -1 for None."""
    if text is None:
        return -1
    major, pos = _strtol(text, 0)
    result = major << 16
    if pos < len(text) and text[pos] in "._":
        minor, pos = _strtol(text, pos + 1)
        result += minor << 8
        if pos < len(text) and text[pos] in "._":
            patch, pos = _strtol(text, pos + 1)
            result += patch
    return result


def display_semantic_version(version: int) -> str:
    """Render a packed version as "major.minor.patch", or "invalid" if negative."""
    if version < 0:
        return "invalid"
    return f"{(version >> 16) & 0xFF}.{(version >> 8) & 0xFF}.{version & 0xFF}"


def _iter_nothing() -> Iterable[None]:  # pragma: no cover - kept private
    return iter(())