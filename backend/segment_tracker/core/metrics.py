"""
Suivi des performances (temps de reponse API, duree des appels).
Le recorder appartient a l'application (app.state.metrics) : pas d'etat global.
"""
import logging
import time
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class MetricsRecorder:
    """Buffer borne de mesures de duree"""

    def __init__(self, max_entries: int = 1000, slow_threshold_ms: float = 1000):
        self.slow_threshold_ms = slow_threshold_ms
        self._entries: deque = deque(maxlen=max_entries)

    def record(self, kind: str, name: str, duration_ms: float, **meta: Any) -> Dict[str, Any]:
        entry = {
            "kind": kind,
            "name": name,
            "duration_ms": round(duration_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **meta,
        }
        self._entries.append(entry)
        if duration_ms > self.slow_threshold_ms:
            logger.warning(f"Lent: {kind} {name} a pris {duration_ms:.0f}ms")
        return entry

    @contextmanager
    def track(self, kind: str, name: str):
        """Mesure la duree du bloc, meme en cas d'exception."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(kind, name, (time.perf_counter() - start) * 1000)

    def entries(self, kind: str = None) -> List[Dict[str, Any]]:
        return [e for e in self._entries if kind is None or e["kind"] == kind]

    def slow_entries(self, threshold_ms: float = None) -> List[Dict[str, Any]]:
        threshold = self.slow_threshold_ms if threshold_ms is None else threshold_ms
        return [e for e in self._entries if e["duration_ms"] > threshold]

    def summary(self) -> Dict[str, Dict[str, Any]]:
        """count / avg / min / max par (kind, name)."""
        grouped: Dict[str, List[float]] = {}
        for entry in self._entries:
            grouped.setdefault(f"{entry['kind']}:{entry['name']}", []).append(entry["duration_ms"])
        return {
            key: {
                "count": len(durations),
                "avg_ms": round(sum(durations) / len(durations), 2),
                "min_ms": min(durations),
                "max_ms": max(durations),
            }
            for key, durations in grouped.items()
        }

    def clear(self) -> None:
        self._entries.clear()
