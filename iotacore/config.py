"""Configuration of input channels, daylight saving rules and the simulated solar source."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional, Sequence

from .simsolar import SimSolar
from .timeservices import DateTimeRule, TzRule

log = logging.getLogger(__name__)

_TDC_OLD_MODEL = "TDC DA-10-09(USA)"


class ChannelType(Enum):
    """What an input channel measures."""

    UNDEFINED = "undefined"
    VOLTAGE = "VT"
    POWER = "CT"


@dataclass
class InputChannel:
    """Settings of one input channel."""

    channel: int
    name: Optional[str] = None
    model: Optional[str] = None
    type: ChannelType = ChannelType.UNDEFINED
    active: bool = False
    turns: float = 0.0
    calibration: float = 0.0
    burden: float = 0.0
    phase: float = 0.0
    vphase: float = 0.0
    vchannel: int = 0
    vmult: float = 1.0
    reverse: bool = False
    signed: bool = False
    double: bool = False
    addr: int = 0
    aref: int = 0
    p50: Optional[list[int]] = None
    p60: Optional[list[int]] = None

    def __post_init__(self) -> None:
        if self.name is None:
            self.name = f"Input({self.channel})"
        if self.addr == 0:
            self.addr = self.channel

    def reset(self) -> None:
        """Return the channel to its unconfigured state, keeping its hardware settings."""
        keep = {"channel", "addr", "aref", "burden"}
        fresh = InputChannel(self.channel)
        for item in fields(self):
            if item.name not in keep:
                setattr(self, item.name, getattr(fresh, item.name))


def make_channels(count: int) -> list[InputChannel]:
    """Create ``count`` unconfigured channels named Input(0), Input(1), ..."""
    if count < 1:
        raise ValueError("at least one channel is required")
    return [InputChannel(i) for i in range(count)]


def _load(config: Any) -> Any:
    if isinstance(config, (str, bytes, bytearray)):
        try:
            return json.loads(config)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Json parse failed: {exc}") from exc
    return config


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _as_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return default


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _period(value: Any) -> DateTimeRule:
    period = _dict(value)
    return DateTimeRule(
        month=_as_int(period.get("month")),
        weekday=_as_int(period.get("weekday")),
        instance=_as_int(period.get("instance")),
        time=_as_int(period.get("time")),
    )


def parse_dst_rule(config: Any) -> TzRule:
    """Build a daylight saving rule from its JSON text or parsed object."""
    rule = _load(config)
    if not isinstance(rule, dict):
        raise ValueError("DST rule must be a JSON object")
    return TzRule(
        beg_period=_period(rule.get("begin")),
        end_period=_period(rule.get("end")),
        use_utc=_as_bool(rule.get("utc")),
        adj_minutes=_as_int(rule.get("adj")),
    )


def parse_sim_solar(config: Any) -> SimSolar:
    """Build a simulated solar source from its JSON text or parsed object."""
    settings = _load(config)
    if not isinstance(settings, dict):
        raise ValueError("simsolar configuration must be a JSON object")
    solar = SimSolar()
    solar.config(
        _as_int(settings.get("sunrise")),
        _as_int(settings.get("sunset")),
        _as_int(settings.get("power")),
    )
    return solar


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def configure_inputs(channels: Sequence[InputChannel], inputs: Any) -> None:
    """Apply an inputs array (JSON text or list) to the channels, in place.

    Entries that are not objects reset their channel; entries whose
    "channel" does not match their position are skipped.
    """
    entries = _load(inputs)
    if not isinstance(entries, list):
        raise ValueError("inputs must be a JSON array")

    for index, (channel, entry) in enumerate(zip(channels, entries)):
        if not isinstance(entry, dict):
            channel.reset()
            continue
        if index != _as_int(entry.get("channel")):
            log.warning("Config input channel mismatch: %d", index)
            continue

        channel.name = _text(entry.get("name"))
        model = _text(entry.get("model"))
        if model == _TDC_OLD_MODEL:
            model = model[:12]
        channel.model = model
        channel.turns = _as_float(entry.get("turns"))
        channel.calibration = _as_float(entry.get("cal"))
        if channel.turns and channel.burden:
            channel.calibration = channel.turns / channel.burden
        channel.phase = _as_float(entry.get("phase"))
        channel.vphase = _as_float(entry.get("vphase"))
        channel.vchannel = _as_int(entry["vref"]) if "vref" in entry else 0
        channel.active = True
        channel.reverse = _as_bool(entry.get("reverse"))

        kind = entry.get("type")
        if kind == "VT":
            channel.type = ChannelType.VOLTAGE
            channel.vchannel = index
        elif kind == "CT":
            channel.type = ChannelType.POWER
            channel.vchannel = _as_int(entry.get("vchan"))
            channel.signed = _as_bool(entry.get("signed"))
            channel.double = _as_bool(entry.get("double"))
        else:
            log.warning("unsupported input type: %s", kind)

        channel.vmult = _as_float(entry["vmult"]) if "vmult" in entry else 1.0
        if channel.double:
            channel.vmult *= 2.0