"""Simulated solar output following a sine curve between sunrise and sunset."""

from __future__ import annotations

import math
from datetime import datetime, timezone


def _hour_of_day(instant: int) -> float:
    moment = datetime.fromtimestamp(instant, tz=timezone.utc)
    return moment.hour + (moment.minute * 60 + moment.second) / 3600.0


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class SimSolar:
    """Simulated solar source; sunrise and sunset are hours of the UTC day."""

    def __init__(self) -> None:
        self.sunrise = 7.0
        self.sunset = 17.0
        self.peak_power = 1000.0

    def _radians(self, hour: float) -> float:
        return _clamp(math.pi * (hour - self.sunrise) / (self.sunset - self.sunrise), 0.0, math.pi)

    def power(self, instant: int) -> float:
        """Return the simulated power in watts at a unix time."""
        return self.peak_power * math.sin(self._radians(_hour_of_day(instant)))

    def energy(self, begin: int, end: int) -> float:
        """Return the simulated energy in watt-hours between two unix times."""
        if begin >= end:
            return 0.0
        days = (end - begin) // 86400
        begin_radians = self._radians(_hour_of_day(begin))
        end_radians = self._radians(_hour_of_day(end))
        energy = days * 2.0
        if begin_radians < end_radians:
            energy += math.cos(begin_radians) - math.cos(end_radians)
        elif begin_radians > end_radians:
            energy += 2 - (math.cos(end_radians) - math.cos(begin_radians))
        return self.peak_power * energy * (self.sunset - self.sunrise) / math.pi

    def config(self, sunrise: int, sunset: int, power: int) -> bool:
        """Set sunrise and sunset as HHMM values and the peak power in watts."""
        hours, minutes = divmod(sunrise, 100)
        self.sunrise = hours + minutes / 60.0
        hours, minutes = divmod(sunset, 100)
        self.sunset = hours + minutes / 60.0
        self.peak_power = float(power)
        return True