"""Persist and load CLI column-mapping profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional


@dataclass
class ColumnProfile:
    column_mapping: Dict[str, str]
    template_key: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "ColumnProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            column_mapping=data.get("column_mapping", {}),
            template_key=data.get("template_key"),
        )

    def save(self, path: Path) -> None:
        payload = {
            "column_mapping": self.column_mapping,
            "template_key": self.template_key,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
