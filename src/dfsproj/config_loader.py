"""Persist and load CLI mapping profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass
class MappingProfile:
    salary_mapping: Dict[str, str] = field(default_factory=dict)
    threshold: Optional[float] = None

    @classmethod
    def load(cls, path: Path) -> "MappingProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        threshold = data.get("threshold")
        return cls(
            salary_mapping=data.get("salary_mapping", {}),
            threshold=float(threshold) if threshold is not None else None,
        )

    def save(self, path: Path) -> None:
        payload = {
            "salary_mapping": self.salary_mapping,
            "threshold": self.threshold,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
