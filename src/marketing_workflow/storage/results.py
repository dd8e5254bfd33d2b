"""JSON-file store for saved feature records."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from marketing_workflow.workflow.models import FeatureRecord

logger = logging.getLogger(__name__)


@dataclass
class ResultStore:
    """Persist completed features to a single JSON file.

    Saving is keyed by run id, so replaying the save step for a run overwrites
    its earlier record instead of duplicating it.
    """

    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _load_unlocked(self) -> list[FeatureRecord]:
        if not self.path.exists():
            return []
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"Results file is not a JSON list: {self.path}")
        return [FeatureRecord.model_validate(item) for item in raw]

    def _save_unlocked(self, records: list[FeatureRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in records]
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def load(self) -> list[FeatureRecord]:
        with self._lock:
            return self._load_unlocked()

    def save(self, record: FeatureRecord) -> FeatureRecord:
        with self._lock:
            records = [r for r in self._load_unlocked() if r.run_id != record.run_id]
            records.append(record)
            self._save_unlocked(records)

        logger.info(
            "Feature saved",
            extra={"run_id": record.run_id, "feature_name": record.name, "path": str(self.path)},
        )
        return record
