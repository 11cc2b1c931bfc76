from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from .batch_runner import BatchOutcome

LOG = logging.getLogger(__name__)


class BatchReportLogger:
    """Appends one JSON entry per batch run to a log file."""

    def __init__(self, log_path: str | Path = "monocatcher_log.json"):
        self.log_path = Path(log_path)
        self.logs = self._load()

    def _load(self) -> list[dict]:
        if self.log_path.exists():
            try:
                data = json.loads(self.log_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                LOG.warning("Report log %s is not valid JSON (%s); starting a new one.", self.log_path, exc)
                return []
            return data if isinstance(data, list) else []
        return []

    def _write(self) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text(json.dumps(self.logs, indent=2), encoding="utf-8")

    def record(self, outcome: BatchOutcome, destination_dir: str, name: str = "batch") -> dict:
        entry = {
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
            "run_name": name,
            "destination": destination_dir,
            "metrics": {
                "total": len(outcome.outcomes),
                "fake_stereo": outcome.fake_stereo_count,
                "failed": len(outcome.failures),
                "cancelled": outcome.cancelled,
            },
            "files": [o.to_dict() for o in outcome.outcomes],
        }
        self.logs.append(entry)
        self._write()
        return entry
