import threading
from typing import List, Tuple


class AtomicCounter:
    """Integer that many worker threads can bump at once. Increment and read only."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ErrorLog:
    """Append-only list of (path, reason) entries shared by worker threads."""

    def __init__(self):
        self._entries: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def append(self, path: str, reason: str):
        with self._lock:
            self._entries.append((path, reason))

    def entries(self) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._entries)

    def __len__(self):
        with self._lock:
            return len(self._entries)
