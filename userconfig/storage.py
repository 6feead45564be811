"""Storage backends for per-user configuration blobs.

Keys are treated as an opaque path: the backend stores and looks up the
exact tuple it was given and never combines entries for different key paths.
"""
from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from loguru import logger

KeyPath = Tuple[str, ...]

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]")


class UserConfigurationStorage(Protocol):
    """Contract of a user configuration store."""

    def load(self, username: str, config_id: str, keys: KeyPath) -> Optional[str]:
        ...

    def store(self, username: str, config_id: str, keys: KeyPath, content: str) -> None:
        ...


class InMemoryUserConfigurationStorage:
    """Thread-safe dict-backed store, used for tests and single-process setups."""

    def __init__(self):
        self._entries: Dict[Tuple[str, str, KeyPath], str] = {}
        self._lock = threading.Lock()

    def load(self, username: str, config_id: str, keys: KeyPath) -> Optional[str]:
        with self._lock:
            return self._entries.get((username, config_id, tuple(keys)))

    def store(self, username: str, config_id: str, keys: KeyPath, content: str) -> None:
        with self._lock:
            self._entries[(username, config_id, tuple(keys))] = content


class JsonFileUserConfigurationStorage:
    """One JSON document per user under a directory.

    Layout of ``<directory>/<username>.json``::

        {"<config_id>": {"<key/path>": "<content>", "": "<content without keys>"}}
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _path_for(self, username: str) -> Path:
        return self.directory / f"{_UNSAFE_FILENAME.sub('_', username)}.json"

    @staticmethod
    def _key(keys: KeyPath) -> str:
        return "/".join(keys)

    def _read(self, path: Path) -> Dict[str, Dict[str, str]]:
        if not path.exists():
            return {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def load(self, username: str, config_id: str, keys: KeyPath) -> Optional[str]:
        with self._lock:
            document = self._read(self._path_for(username))
        return document.get(config_id, {}).get(self._key(keys))

    def store(self, username: str, config_id: str, keys: KeyPath, content: str) -> None:
        path = self._path_for(username)
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            document = self._read(path)
            document.setdefault(config_id, {})[self._key(keys)] = content
            # Write to a temp file and rename so readers never see a partial document
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, sort_keys=True)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        logger.debug("Stored user configuration {}/{} for {}", config_id, self._key(keys), username)
