"""A collection of JSON documents kept in one file.

Each collection file holds a list of documents.  All reads and writes of
one file go through a lock shared by every store opened on that path in
this process, and writes replace the file atomically (temp file +
``os.replace``), so a reader never sees a half-written collection.

``transaction()`` is the single-document update primitive the repositories
build on: the block runs against the current stored state and its changes
are written only if it finishes without raising.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

Document = dict[str, Any]

_LOCKS: dict[Path, threading.RLock] = {}
_LAST_IDS: dict[Path, int] = {}
_REGISTRY_LOCK = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _REGISTRY_LOCK:
        lock = _LOCKS.get(path)
        if lock is None:
            lock = _LOCKS[path] = threading.RLock()
        return lock


class JsonDocumentStore:

    def __init__(self, file_path: Path, key: str = "id") -> None:
        self._file_path = Path(file_path).resolve()
        self._key = key
        self._lock = _lock_for(self._file_path)
        self._ensure_file()

    # --- Queries --------------------------------------------------------------

    def all(self) -> list[Document]:
        with self._lock:
            return self._load_raw()

    def find(self, predicate: Callable[[Document], bool]) -> Document | None:
        for doc in self.all():
            if predicate(doc):
                return doc
        return None

    def get(self, key: str) -> Document | None:
        return self.find(lambda doc: doc.get(self._key) == key)

    # --- Writes ---------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[list[Document]]:
        """Yield the stored documents; persist them if the block succeeds."""
        with self._lock:
            docs = self._load_raw()
            yield docs
            self._persist_raw(docs)

    def upsert(self, doc: Document) -> None:
        with self.transaction() as docs:
            for i, existing in enumerate(docs):
                if existing.get(self._key) == doc[self._key]:
                    docs[i] = doc
                    break
            else:
                docs.append(doc)

    def remove(self, key: str) -> bool:
        with self.transaction() as docs:
            for i, existing in enumerate(docs):
                if existing.get(self._key) == key:
                    del docs[i]
                    return True
        return False

    def next_id(self) -> str:
        """Next sequential numeric id, never handed out twice by this process."""
        with self._lock:
            stored = [int(d[self._key]) for d in self._load_raw() if str(d[self._key]).isdigit()]
            last = max(stored + [_LAST_IDS.get(self._file_path, 0)])
            _LAST_IDS[self._file_path] = last + 1
            return str(last + 1)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[Document]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, docs: list[Document]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(docs, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
