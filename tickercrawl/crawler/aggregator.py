"""
Result Aggregator - Deduplicated collection of leaf values
"""

import threading
from typing import Callable, Dict, List, Tuple


def identity(value: str) -> str:
    """Dedup key that keeps every distinct value"""
    return value


def ticker_root(value: str) -> str:
    """Dedup key that drops the exchange suffix ("FB2A:GR" -> "FB2A")"""
    return value.split(':', 1)[0]


class ResultAggregator:
    """
    Collects leaf values, keeping only the first value seen per dedup key

    ``add`` may be called from any completion handler; insertion order of the
    retained values is preserved.
    """

    def __init__(self, key: Callable[[str], str] = identity):
        self.key = key
        self._values: List[str] = []
        self._seen: Dict[str, str] = {}
        self.duplicates_dropped = 0
        self._lock = threading.Lock()

    def add(self, value: str) -> bool:
        """Add a value; returns False when its key was already collected"""
        key = self.key(value)
        with self._lock:
            if key in self._seen:
                self.duplicates_dropped += 1
                return False
            self._seen[key] = value
            self._values.append(value)
            return True

    def snapshot(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
