"""Building blocks for an energy monitor: dates, DST rules, SNTP packets, configuration, phase tables and release unpacking."""

__version__ = "0.1.0"