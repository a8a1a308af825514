import json

import pytest

from iotacore.spiffs import Spiffs


@pytest.fixture
def store(tmp_path):
    return Spiffs(tmp_path / "flash")


def test_write_read_round_trip(store):
    written = store.write("/config/device/burden.txt", "[1,2,3]")
    assert written == len("[1,2,3]")
    assert store.read("/config/device/burden.txt") == "[1,2,3]"


def test_append(store):
    store.write("/a.txt", "abc")
    store.write("/a.txt", b"def", append=True)
    assert store.read("/a.txt") == "abcdef"


def test_overwrite_replaces(store):
    store.write("/a.txt", "abcdef")
    store.write("/a.txt", "xy")
    assert store.read("/a.txt") == "xy"


def test_file_size_and_exists(store):
    assert store.file_exists("/missing") is False
    assert store.file_size("/missing") == 0
    store.write("/data.bin", b"\x00\x01\x02\x03")
    assert store.file_exists("/data.bin") is True
    assert store.file_size("/data.bin") == 4


def test_read_missing_is_empty(store):
    assert store.read("/nothing.txt") == ""


def test_remove_by_prefix(store):
    store.write("/config/a", "1")
    store.write("/config/b", "2")
    store.write("/other", "3")
    assert store.remove("/config") is True
    assert store.file_exists("/config/a") is False
    assert store.file_exists("/config/b") is False
    assert store.read("/other") == "3"


def test_directory_lists_files_and_dedups_dirs(store):
    store.write("/config/device/burden.txt", "x")
    store.write("/config/device/other.txt", "y")
    store.write("/config/x.txt", "z")
    listing = json.loads(store.directory("/config"))
    assert listing == [
        {"type": "dir", "name": "device"},
        {"type": "file", "name": "x.txt"},
    ]


def test_directory_compact_json(store):
    store.write("/cfg/f", "x")
    assert store.directory("/cfg") == '[{"type":"file","name":"f"}]'


def test_format_clears(store):
    store.write("/a", "1")
    assert store.format() is True
    assert store.file_exists("/a") is False
    assert json.loads(store.directory("")) == []


def test_unmountable_store(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = Spiffs(blocker)
    assert store.begin() is False
    assert store.write("/a", "1") == 0
    assert store.read("/a") == ""
    assert store.directory("/") == "[]"


def test_invalid_name_rejected(store):
    with pytest.raises(ValueError):
        store.write("/../escape", "x")