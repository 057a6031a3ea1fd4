"""In-process anomaly counters.

Heuristic recoveries (the include-all reconciliation fallback, derived
container ids, skipped bundle passengers, pricing resubmission) bump a
counter here so the caller can surface how often the engine guessed.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

RECONCILIATION_FALLBACK = "reconciliation_fallback"
CONTAINER_ID_DERIVED = "container_id_derived"
BUNDLE_PAX_SKIPPED = "bundle_pax_skipped"
PRICING_RECOVERY = "pricing_recovery"

_COUNTERS_LOCK = threading.Lock()
_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], int] = {}


def _labels_key(labels: Optional[Dict[str, str]]) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def inc_counter(metric: str, labels: Optional[Dict[str, str]] = None) -> None:
    key = (metric, _labels_key(labels))
    with _COUNTERS_LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0) + 1


def get_counter(metric: str, labels: Optional[Dict[str, str]] = None) -> int:
    with _COUNTERS_LOCK:
        return _COUNTERS.get((metric, _labels_key(labels)), 0)


def reset_counters() -> None:
    with _COUNTERS_LOCK:
        _COUNTERS.clear()
