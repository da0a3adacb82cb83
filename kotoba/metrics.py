from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from kotoba.config import Settings


class Span:
    """Times one upstream call. The first read of ``upstream_ms`` fixes the end."""

    def __init__(self) -> None:
        self.started = time.perf_counter()
        self.finished: Optional[float] = None

    def upstream_ms(self) -> float:
        if self.finished is None:
            self.finished = time.perf_counter()
        return round((self.finished - self.started) * 1000.0, 2)


def log_metrics(entry: Dict[str, Any], settings: Settings) -> None:
    """Append one JSON line per provider-backed request when LOG_METRICS is on."""
    if not settings.log_metrics:
        return
    path = Path(settings.metrics_jl_path)
    entry.setdefault("ts", int(time.time() * 1000))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            json.dump(entry, handle, ensure_ascii=False)
            handle.write("\n")
    except OSError as exc:
        logger.warning("Failed to append metrics to {}: {}", path, exc)
