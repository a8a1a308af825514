"""Time zone and daylight saving rules, and the SNTP packet exchange."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .utilities import datef

SECONDS_PER_SEVENTY_YEARS = 2208988800
NTP2018 = 1514796044 + SECONDS_PER_SEVENTY_YEARS
NTP2028 = 1830328844 + SECONDS_PER_SEVENTY_YEARS
NTP_PORT = 123
NTP_PACKET_SIZE = 48

_FRAC_PER_MS = 4294967
_MASK32 = 0xFFFFFFFF
_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_PACKET = struct.Struct(">BBBBII4sIIIIIIII")


@dataclass
class DateTimeRule:
    """A starting date and time in any year.

    ``weekday`` runs Sunday..Saturday as 1..7; ``instance`` counts from the
    start of the month (1, 2, ...) or from its end (-1 = last, -2 = second last);
    ``time`` is minutes after midnight.
    """

    month: int = 1
    weekday: int = 1
    instance: int = 1
    time: int = 0


@dataclass
class TzRule:
    """A daylight saving period and the adjustment applied during it."""

    beg_period: DateTimeRule = field(default_factory=DateTimeRule)
    end_period: DateTimeRule = field(default_factory=DateTimeRule)
    use_utc: bool = False
    adj_minutes: int = 0


class NtpError(Exception):
    """Raised when an NTP response is malformed or cannot be trusted."""


@dataclass
class NtpPacket:
    """An SNTP packet; timestamps are plain integers."""

    flags: int = 0xE3
    stratum: int = 0
    poll: int = 6
    precision: int = 0xEC
    root_delay: int = 0
    root_dispersion: int = 0
    reference_id: bytes = bytes((49, 0x4E, 49, 52))
    ref_ts_sec: int = 0
    ref_ts_frac: int = 0
    origin_ts_sec: int = 0
    origin_ts_frac: int = 0
    recv_ts_sec: int = 0
    recv_ts_frac: int = 0
    trans_ts_sec: int = 0
    trans_ts_frac: int = 0

    def to_bytes(self) -> bytes:
        """Serialise the packet in network byte order."""
        return _PACKET.pack(
            self.flags,
            self.stratum,
            self.poll,
            self.precision,
            self.root_delay & _MASK32,
            self.root_dispersion & _MASK32,
            bytes(self.reference_id)[:4].ljust(4, b"\0"),
            self.ref_ts_sec & _MASK32,
            self.ref_ts_frac & _MASK32,
            self.origin_ts_sec & _MASK32,
            self.origin_ts_frac & _MASK32,
            self.recv_ts_sec & _MASK32,
            self.recv_ts_frac & _MASK32,
            self.trans_ts_sec & _MASK32,
            self.trans_ts_frac & _MASK32,
        )


def parse_ntp_packet(data: bytes) -> NtpPacket:
    """Decode a server response.

    The receive and transmit fractions are converted to milliseconds; the
    origin timestamp is left as echoed by the server.
    """
    if len(data) < NTP_PACKET_SIZE:
        raise NtpError(f"short NTP packet: {len(data)} bytes")
    fields = _PACKET.unpack(bytes(data[:NTP_PACKET_SIZE]))
    packet = NtpPacket(*fields)
    packet.recv_ts_frac //= _FRAC_PER_MS
    packet.trans_ts_frac //= _FRAC_PER_MS
    return packet


def ntp_transmit_time(packet: NtpPacket, origin_sec: int, origin_frac: int, duration_ms: int) -> tuple[int, int]:
    """Validate a parsed response and return the current NTP time as (seconds, milliseconds).

    The time is the server's transmit time plus half the round trip.
    """
    if packet.stratum == 0:
        code = bytes(packet.reference_id).decode("latin-1")
        raise NtpError(f"Kiss-o'-Death, code {code}")
    if packet.origin_ts_sec != origin_sec or packet.origin_ts_frac != origin_frac:
        raise NtpError("origin timestamp does not match request")
    if not NTP2018 <= packet.trans_ts_sec <= NTP2028:
        raise NtpError(f"transmit time {packet.trans_ts_sec} out of range")
    total = packet.trans_ts_frac + duration_ms // 2
    return (packet.trans_ts_sec + total // 1000) & _MASK32, total % 1000


def little_endian(value: int) -> int:
    """Reverse the byte order of a 32-bit value."""
    return int.from_bytes((value & _MASK32).to_bytes(4, "little"), "big")


def test_rule(standard_time: int, rule: DateTimeRule) -> bool:
    """Return True if ``standard_time`` is at or after the rule's moment in its year."""
    now = datetime.fromtimestamp(standard_time, tz=timezone.utc)
    if now.month < rule.month:
        return False
    if now.month > rule.month:
        return True
    month_days = _DAYS_IN_MONTH[now.month - 1]
    first_weekday = ((standard_time - (now.day - 1) * 86400) // 86400 + 4) % 7 + 1
    last_weekday = (first_weekday + month_days - 2) % 7 + 1
    if rule.instance > 0:
        start_day = (rule.weekday - first_weekday + 7) % 7 + 1 + (rule.instance - 1) * 7
    else:
        start_day = month_days - (last_weekday - rule.weekday + 7) % 7 + rule.instance * 7 + 7
    if now.day < start_day:
        return False
    if now.day > start_day:
        return True
    return now.hour * 60 + now.minute >= rule.time


def utc_to_local(utc_time: int, local_time_diff: float = 0, rule: TzRule | None = None) -> int:
    """Convert UTC to local time given the zone offset in minutes and an optional DST rule."""
    result = utc_time + int(local_time_diff * 60)
    if rule is None:
        return result & _MASK32
    adjust = rule.adj_minutes * 60

    def basis(candidate: int) -> int:
        return utc_time if rule.use_utc else candidate

    if rule.beg_period.month <= rule.end_period.month:
        if (
            test_rule(basis(result), rule.beg_period)
            and not test_rule(basis(result), rule.end_period)
            and not test_rule(basis(result + adjust), rule.end_period)
        ):
            result += adjust
    else:
        result += adjust
        if test_rule(basis(result), rule.end_period):
            result -= adjust
        if test_rule(basis(result), rule.beg_period):
            result += adjust
    return result & _MASK32


def local_to_utc(local_time: int, local_time_diff: float = 0, rule: TzRule | None = None) -> int:
    """Convert local time back to UTC."""
    trial = local_time - int(local_time_diff * 60)
    test_local = utc_to_local(trial, local_time_diff, rule)
    return (trial - test_local + local_time) & _MASK32


def local_date_string(unix_time: int, local_time_diff: float = 0, rule: TzRule | None = None) -> str:
    """Format a UTC time as a local "MM/DD/YY hh:mm:ss" string."""
    return datef(utc_to_local(unix_time, local_time_diff, rule), "MM/DD/YY hh:mm:ss")