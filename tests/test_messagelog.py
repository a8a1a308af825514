import io

from iotacore.messagelog import RESTART_BANNER, MessageLog
from iotacore.utilities import datef, unixtime


def test_first_message_has_restart_banner(tmp_path):
    path = tmp_path / "msgs.txt"
    log = MessageLog(path)
    log.log("hello %d", 5)
    assert path.read_bytes() == RESTART_BANNER + b"hello 5\r\n"


def test_banner_only_once(tmp_path):
    path = tmp_path / "msgs.txt"
    log = MessageLog(path)
    log.log("first")
    log.log("second")
    text = path.read_text()
    assert text.count("** Restart **") == 1
    assert text.endswith("first\r\nsecond\r\n")


def test_console_receives_same_text(tmp_path):
    path = tmp_path / "msgs.txt"
    console = io.StringIO()
    log = MessageLog(path, console=console)
    log.log("abc %s", "def")
    assert console.getvalue() == path.read_text()


def test_write_returns_length(tmp_path):
    log = MessageLog(tmp_path / "msgs.txt")
    assert log.write("twelve chars") == len("twelve chars")
    assert log.write(b"\x01\x02\x03") == 3


def test_timestamp_with_utc_marker(tmp_path):
    path = tmp_path / "msgs.txt"
    t = unixtime(2021, 3, 14, 1, 2, 3)
    log = MessageLog(path, clock=lambda: t, local_time_diff=0)
    log.log("tick")
    stamp = datef(t, "M/DD/YY hh:mm:ss")
    assert path.read_text() == RESTART_BANNER.decode() + stamp + "z tick\r\n"


def test_timestamp_local_time(tmp_path):
    path = tmp_path / "msgs.txt"
    t = unixtime(2021, 3, 14, 1, 2, 3)
    log = MessageLog(path, clock=lambda: t, local_time_diff=-300)
    log.log("tick")
    stamp = datef(t, "M/DD/YY hh:mm:ss")
    assert path.read_text().endswith(stamp + " tick\r\n")


def test_no_timestamp_without_clock(tmp_path):
    path = tmp_path / "msgs.txt"
    log = MessageLog(path, clock=lambda: None)
    log.log("tick")
    assert path.read_bytes() == RESTART_BANNER + b"tick\r\n"


def test_long_message_survives_buffer_flushes(tmp_path):
    path = tmp_path / "msgs.txt"
    console = io.StringIO()
    message = "x" * 250 + "end"
    log = MessageLog(path, console=console)
    log.log(message)
    assert path.read_text() == RESTART_BANNER.decode() + message + "\r\n"
    assert console.getvalue() == path.read_text()


def test_short_message_does_not_create_directory(tmp_path):
    path = tmp_path / "iotawatt" / "msgs.txt"
    log = MessageLog(path)
    log.log("short")
    assert not path.parent.exists()


def test_overflow_creates_directory(tmp_path):
    path = tmp_path / "iotawatt" / "msgs.txt"
    message = "y" * 100
    log = MessageLog(path)
    log.log(message)
    assert path.read_text() == RESTART_BANNER.decode() + message + "\r\n"