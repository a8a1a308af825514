# iotacore

Building blocks for an energy-monitoring device, usable on any host running Python.

## Modules

- `iotacore.utilities`: case-insensitive compare (`strcmp_ci`), hex and base64 helpers (`format_hex`, `bin2hex`, `hex2bin`, `base64encode`, `hash_name`), and date handling (`unixtime`, `datef`, `yyyymmdd_to_unixtime`, `hhmmss_to_daytime`). It also packs semantic versions into integers (`parse_semantic_version`, `display_semantic_version`), hashes and copies files (`hash_file`, `copy_file`), and reads large JSON documents in pieces: `json_summary` replaces nested objects or arrays with `[position,length]` locators, and `json_detail` reads the condensed text a locator points to.
- `iotacore.splitstr`: `split_line` splits a delimited line into fields trimmed of spaces.
- `iotacore.timeservices`: daylight-saving rules (`DateTimeRule`, `TzRule`, `test_rule`), UTC and local time conversion (`utc_to_local`, `local_to_utc`, `local_date_string`), byte-order reversal (`little_endian`), and SNTP packets: `NtpPacket.to_bytes` builds a request, `parse_ntp_packet` decodes a response and `ntp_transmit_time` checks it and returns the current NTP time, raising `NtpError` when the response cannot be trusted.
- `iotacore.simsolar`: `SimSolar` gives simulated solar power (`power`) and energy (`energy`) from sunrise and sunset times given as HHMM and a peak power (`config`).
- `iotacore.messagelog`: `MessageLog` collects message text in a small buffer and appends it to a log file and an optional console stream, starting with a restart banner and prefixing each message with a timestamp when a clock is given.
- `iotacore.spiffs`: `Spiffs` is a flat file store kept under a directory on disk, with names like `/config/device/burden.txt` and pseudo-directories listed by `directory` as JSON.
- `iotacore.config`: input channel settings (`InputChannel`, `ChannelType`, `make_channels`, `configure_inputs`), DST rule parsing (`parse_dst_rule`) and simulated solar parsing (`parse_sim_solar`). Parsers accept JSON text or already parsed objects and raise `ValueError` on malformed input.
- `iotacore.phasetable`: `parse_phase_array`, `find_phase_arrays` and `assign_phase_arrays` look up 50 Hz and 60 Hz phase-shift arrays for each sensor model in a tables text, in hundredths of a degree.
- `iotacore.updater`: `unpack_update` unpacks a release blob into a directory and checks its Ed25519 signature, raising `UpdateError` on any problem. `copy_update` moves staged files into place without replacing an existing `config.txt`, `get_tables_version` reads the version of a tables file, and `check_versions` interprets a server's versions document into a `VersionCheck`.

## Example

```python
from iotacore.utilities import datef, unixtime
from iotacore.simsolar import SimSolar

t = unixtime(2020, 3, 8, 12, 30, 0)
print(datef(t, "MM/DD/YY hh:mm:ss"))   # 03/08/20 12:30:00

sun = SimSolar()
sun.config(700, 1700, 1000)
print(sun.power(t))
```

## What it does not do

The package is a library with no command of its own. It does not talk to
the network: it builds and checks SNTP packets but does not send them, and
it interprets a versions document and unpacks a downloaded release but does
not fetch either. It does not flash firmware, sample sensors, upload data
or run services on a schedule.

## Installing and testing

```
pip install .
pip install .[test]
pytest
```