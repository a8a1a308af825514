"""Firmware release unpacking and installation, and version checks against the update server."""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from .utilities import json_summary, parse_semantic_version

log = logging.getLogger(__name__)

RELEASE_MAGIC = b"IotaWatt"
FIRMWARE_NAME = "iotawatt.bin"
CONFIG_NAME = "config.txt"
SIGNATURE_SIZE = 64
PUBLIC_KEY_SIZE = 32
_RELEASE_HEADER_SIZE = 16
_FILE_HEADER = struct.Struct("<4sI24s")
_FILE_TAG = b"FILE"
_BLOCK = 8


class UpdateError(Exception):
    """Raised when a release cannot be unpacked, verified or understood."""


@dataclass(frozen=True)
class VersionCheck:
    """Outcome of comparing the server's versions document with what is installed.

    ``update_version`` is the firmware version to download, or None when the
    configured class is current or unknown. ``class_known`` tells whether the
    server lists the configured class. Tables are only considered when no
    firmware update is due; ``latest_table_version`` is then the server's
    packed tables version (-1 if absent) and ``update_tables`` whether it is
    newer than the installed one.
    """

    update_version: Optional[str]
    class_known: bool
    latest_table_version: int = -1
    update_tables: bool = False


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _safe_name(raw: bytes) -> str:
    name = raw.split(b"\0", 1)[0].decode("latin-1")
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise UpdateError(f"invalid file name in release: {name!r}")
    return name


def unpack_update(release_path, version: str, dest_dir, public_key: bytes) -> bool:
    """Unpack a signed release blob into ``dest_dir/version``.

    The firmware image gets the hex MD5 of its contents appended. The
    Ed25519 signature at the end of the blob is checked against the SHA-256
    of everything before it. Returns True if the release held a firmware
    image; raises UpdateError on any format or signature problem.
    """
    release_path = Path(release_path)
    try:
        data = release_path.read_bytes()
    except OSError as exc:
        raise UpdateError(f"{release_path} not found") from exc

    if len(data) < _RELEASE_HEADER_SIZE + SIGNATURE_SIZE:
        raise UpdateError("release file header invalid")
    header = data[:_RELEASE_HEADER_SIZE]
    expected_release = version.encode("latin-1")[:8].ljust(8, b"\0")
    if header[:8] != RELEASE_MAGIC or header[8:16] != expected_release:
        raise UpdateError(
            f"release file header invalid. {header[:8]!r} {header[8:16]!r}"
        )
    sha = hashlib.sha256(header)

    update_dir = Path(dest_dir) / version
    try:
        _remove_path(update_dir)
        update_dir.mkdir(parents=True)
    except OSError as exc:
        raise UpdateError("Cannot create update directory") from exc

    body_end = len(data) - SIGNATURE_SIZE
    pos = _RELEASE_HEADER_SIZE
    binary_found = False
    while pos < body_end:
        if pos + _FILE_HEADER.size > body_end:
            raise UpdateError("Release file format error.")
        tag, length, raw_name = _FILE_HEADER.unpack_from(data, pos)
        sha.update(data[pos:pos + _FILE_HEADER.size])
        pos += _FILE_HEADER.size
        if tag != _FILE_TAG:
            raise UpdateError("Release file format error.")
        name = _safe_name(raw_name)
        padded = length + (-length % _BLOCK)
        if pos + padded > body_end:
            raise UpdateError(f"release file truncated in {name}")
        content = data[pos:pos + length]
        sha.update(data[pos:pos + padded])
        pos += padded

        is_firmware = name.lower() == FIRMWARE_NAME
        if is_firmware:
            binary_found = True
            content += hashlib.md5(content).hexdigest().encode("ascii")
        try:
            (update_dir / name).write_bytes(content)
        except OSError as exc:
            raise UpdateError(f"unable to create file: {version}/{name}") from exc

    signature = data[body_end:]
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes(public_key))
    except ValueError as exc:
        raise UpdateError("invalid public key") from exc
    try:
        key.verify(signature, sha.digest())
    except InvalidSignature as exc:
        raise UpdateError("Signature does not verify.") from exc
    log.info("Updater: signature verified")
    return binary_found


def copy_update(update_dir, root) -> bool:
    """Move staged release files from ``update_dir`` into ``root``.

    An existing config.txt in ``root`` is never replaced. The update
    directory is removed afterwards. Returns False if there is no update
    directory; a plain file of that name is removed.
    """
    update_dir, root = Path(update_dir), Path(root)
    if not update_dir.exists():
        return False
    if not update_dir.is_dir():
        update_dir.unlink()
        return False

    log.info("Updater: Installing update files for version %s", update_dir.name)
    for source in sorted(update_dir.iterdir()):
        if not source.is_file():
            continue
        target = root / source.name
        if source.name.lower() == CONFIG_NAME and target.exists():
            continue
        log.info("Updater: Installing %s", source.name)
        _remove_path(target)
        shutil.copyfile(source, target)
    log.info("Updater: Installation complete.")
    shutil.rmtree(update_dir)
    return True


def get_tables_version(table_path) -> int:
    """Return the packed version of the tables file, or -1 if it has none."""
    try:
        with Path(table_path).open("rb") as handle:
            summary = json_summary(handle, 1)
    except OSError:
        return -1
    try:
        table = json.loads(summary)
    except json.JSONDecodeError:
        log.warning("Table file parse failed.")
        return -1
    if not isinstance(table, dict) or "version" not in table:
        return -1
    version = table["version"]
    return parse_semantic_version(version if isinstance(version, str) else None)


def check_versions(
    response_text: str, update_class: str, current_version: str, table_version: int
) -> VersionCheck:
    """Interpret the server's versions document for an auto-update class."""
    try:
        response = json.loads(response_text)
    except json.JSONDecodeError as exc:
        raise UpdateError("could not parse versions.json file.") from exc
    if not isinstance(response, dict):
        raise UpdateError("could not parse versions.json file.")
    classes = response.get("classes")
    if not isinstance(classes, dict):
        raise UpdateError("versions.json is invalid.")

    class_known = update_class in classes
    if class_known:
        offered = classes[update_class]
        offered = offered if isinstance(offered, str) else ""
        if offered != current_version:
            log.info("Updater: Update from %s to %s", current_version, offered)
            return VersionCheck(update_version=offered, class_known=True)
    else:
        log.info("Updater: Unrecognized auto-update class %s.", update_class)

    latest = -1
    update_tables = False
    if "tables" in response:
        tables = response["tables"]
        latest = parse_semantic_version(tables if isinstance(tables, str) else None)
        update_tables = latest > table_version
    return VersionCheck(
        update_version=None,
        class_known=class_known,
        latest_table_version=latest,
        update_tables=update_tables,
    )