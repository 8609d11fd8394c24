"""Namespaced key-value settings store persisted to a JSON file."""

from __future__ import annotations

import base64
import json
import logging
import os
import tempfile
from pathlib import Path

__all__ = [
    "NAMESPACE_SIZE",
    "MAX_STRING_LENGTH",
    "MAX_BLOB_SIZE",
    "INVALID_ARG",
    "INVALID_STATE",
    "INVALID_SIZE",
    "NOT_FOUND",
    "NvsError",
    "NvsStore",
]

log = logging.getLogger(__name__)

NAMESPACE_SIZE = 32
MAX_STRING_LENGTH = 256
MAX_BLOB_SIZE = 1024

INVALID_ARG = "invalid_arg"
INVALID_STATE = "invalid_state"
INVALID_SIZE = "invalid_size"
NOT_FOUND = "not_found"

_STR = "str"
_I32 = "i32"
_U32 = "u32"
_BLOB = "blob"


class NvsError(Exception):
    """Failure of a store operation; ``code`` names the kind of failure."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


def _encode(tag: str, value):
    if tag == _BLOB:
        return {"type": tag, "value": base64.b64encode(value).decode("ascii")}
    return {"type": tag, "value": value}


def _decode(entry) -> tuple[str, object]:
    tag = entry["type"]
    value = entry["value"]
    if tag == _BLOB:
        return tag, base64.b64decode(value)
    return tag, value


class NvsStore:
    """A handle on one namespace of a settings file.

    Changes are visible through the handle at once and reach the file on ``commit``.
    """

    def __init__(self, path, namespace: str) -> None:
        if namespace is None:
            raise NvsError("namespace is missing", INVALID_ARG)
        if len(namespace.encode("utf-8")) >= NAMESPACE_SIZE:
            raise NvsError("namespace too long", INVALID_ARG)
        self._path = Path(path)
        self._namespace = namespace
        stored = self._load_all().get(namespace, {})
        self._entries: dict[str, tuple[str, object]] = {}
        for key, entry in stored.items():
            try:
                self._entries[key] = _decode(entry)
            except (KeyError, TypeError, ValueError):
                log.warning("skipping malformed entry %r", key)
        self._open = True
        log.info("settings store opened with namespace %s", namespace)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def is_open(self) -> bool:
        return self._open

    def _load_all(self) -> dict:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except ValueError:
            log.warning("settings file %s is unreadable; starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            log.warning("settings file %s has an unexpected layout; starting empty", self._path)
            return {}
        return data

    def _require_open(self) -> None:
        if not self._open:
            raise NvsError("store is not open", INVALID_STATE)

    def _require_key(self, key) -> None:
        if key is None or not isinstance(key, str):
            raise NvsError("key is missing", INVALID_ARG)

    def _lookup(self, key: str, tag: str):
        entry = self._entries.get(key)
        if entry is None or entry[0] != tag:
            raise NvsError(f"no {tag} value stored under {key!r}", NOT_FOUND)
        return entry[1]

    def _erase(self, key: str) -> None:
        if key not in self._entries:
            raise NvsError(f"no value stored under {key!r}", NOT_FOUND)
        del self._entries[key]

    def set_string(self, key: str, value: str) -> None:
        self._require_open()
        self._require_key(key)
        if value is None:
            raise NvsError("value is missing", INVALID_ARG)
        if len(value.encode("utf-8")) >= MAX_STRING_LENGTH:
            raise NvsError("string value too long", INVALID_ARG)
        self._entries[key] = (_STR, value)

    def get_string(self, key: str, max_length: int = MAX_STRING_LENGTH) -> str:
        """Return the string under ``key``; it must fit, with its terminator, in ``max_length``."""
        self._require_open()
        self._require_key(key)
        value = self._lookup(key, _STR)
        if len(value.encode("utf-8")) + 1 > max_length:
            raise NvsError("string too long for buffer", INVALID_SIZE)
        return value

    def delete_string(self, key: str) -> None:
        self._require_open()
        self._require_key(key)
        self._erase(key)

    def set_int32(self, key: str, value: int) -> None:
        self._require_open()
        self._require_key(key)
        if not -(1 << 31) <= value < (1 << 31):
            raise NvsError("value out of int32 range", INVALID_ARG)
        self._entries[key] = (_I32, int(value))

    def get_int32(self, key: str) -> int:
        self._require_open()
        self._require_key(key)
        return self._lookup(key, _I32)

    def set_uint32(self, key: str, value: int) -> None:
        self._require_open()
        self._require_key(key)
        if not 0 <= value < (1 << 32):
            raise NvsError("value out of uint32 range", INVALID_ARG)
        self._entries[key] = (_U32, int(value))
        log.info("set uint32 %s = %d", key, value)

    def get_uint32(self, key: str) -> int:
        self._require_open()
        self._require_key(key)
        return self._lookup(key, _U32)

    def set_blob(self, key: str, value) -> None:
        self._require_open()
        self._require_key(key)
        if value is None:
            raise NvsError("value is missing", INVALID_ARG)
        data = bytes(value)
        if len(data) > MAX_BLOB_SIZE:
            raise NvsError("blob too large", INVALID_SIZE)
        self._entries[key] = (_BLOB, data)

    def get_blob(self, key: str) -> bytes:
        self._require_open()
        self._require_key(key)
        return self._lookup(key, _BLOB)

    def delete_blob(self, key: str) -> None:
        self._require_open()
        self._require_key(key)
        self._erase(key)

    def erase_all(self) -> None:
        self._require_open()
        self._entries.clear()
        log.info("erased all values in namespace %s", self._namespace)

    def commit(self) -> None:
        """Write this namespace to the settings file, leaving other namespaces intact."""
        self._require_open()
        data = self._load_all()
        data[self._namespace] = {key: _encode(tag, value) for key, (tag, value) in self._entries.items()}
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=directory, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(temp_name, self._path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def close(self) -> None:
        """Release the handle; uncommitted changes are dropped."""
        if not self._open:
            log.warning("settings store already closed")
            return
        self._open = False
        self._entries = {}

    def __enter__(self) -> "NvsStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()