"""Minimal in-process counters and histograms.

No external dependencies. One lock per registry; good enough for a single
FastAPI process serving the threadpool and the event loop at once.
"""

from typing import Dict, Any, Optional, Tuple, List
import threading


LabelsKey = Tuple[Tuple[str, str], ...]

_DEFAULT_BINS: List[int] = [5, 10, 50, 100, 200, 500, 1000, 3000]


def _labels_key(labels: Optional[Dict[str, str]]) -> LabelsKey:
    if not labels:
        return tuple()
    # Stable ordering
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


class MetricsRegistry:
    def __init__(self, bins: Optional[List[int]] = None):
        self.bins: List[int] = list(bins or _DEFAULT_BINS)
        self._lock = threading.Lock()
        self._counters: Dict[Tuple[str, LabelsKey], int] = {}
        # name -> labels -> {"counts": [...], "sum_ms": float}
        self._histograms: Dict[str, Dict[LabelsKey, Dict[str, Any]]] = {}

    def inc_counter(self, metric: str, labels: Optional[Dict[str, str]] = None) -> None:
        key = (metric, _labels_key(labels))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + 1

    def record_timing(self, metric: str, value_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
        if value_ms is None:
            return
        idx = len(self.bins)
        for i, b in enumerate(self.bins):
            if value_ms <= b:
                idx = i
                break
        lk = _labels_key(labels)
        with self._lock:
            series = self._histograms.setdefault(metric, {})
            entry = series.get(lk)
            if entry is None:
                entry = {"counts": [0] * (len(self.bins) + 1), "sum_ms": 0.0}
                series[lk] = entry
            entry["counts"][idx] += 1
            entry["sum_ms"] += float(value_ms)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            counters = [
                {"name": name, "labels": dict(labels), "value": value}
                for (name, labels), value in self._counters.items()
            ]
            histograms = [
                {
                    "name": name,
                    "labels": dict(labels),
                    "bins_ms": list(self.bins),
                    "counts": list(entry["counts"]),
                    "sum_ms": entry["sum_ms"],
                }
                for name, series in self._histograms.items()
                for labels, entry in series.items()
            ]
        return {"counters": counters, "histograms": histograms}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


_REGISTRY = MetricsRegistry()


def inc_counter(metric: str, labels: Optional[Dict[str, str]] = None) -> None:
    _REGISTRY.inc_counter(metric, labels)


def record_timing(metric: str, value_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
    _REGISTRY.record_timing(metric, value_ms, labels)


def get_metrics_snapshot() -> Dict[str, Any]:
    return _REGISTRY.snapshot()


def reset_metrics() -> None:
    _REGISTRY.reset()
