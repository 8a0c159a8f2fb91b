from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


@dataclass(slots=True, frozen=True)
class CoverageSettings:
    """Labels and switches used when presenting coverage results."""

    speaker_label: str = "Detective"
    no_category_label: str = "(none)"
    undefined_coverage_label: str = "-"
    show_categories: bool = True

    DEFAULT_PATH = Path("coverage_settings.json")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CoverageSettings:
        known = {item.name for item in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown coverage setting '{}'", key)
                continue
            expected = bool if key == "show_categories" else str
            if not isinstance(value, expected):
                logger.warning("Ignoring coverage setting '{}' with invalid value {!r}", key, value)
                continue
            values[key] = value
        return cls(**values)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> CoverageSettings:
        storage_path = Path(path) if path else cls.DEFAULT_PATH
        if not storage_path.exists():
            logger.debug("Coverage settings file {} not found; using defaults", storage_path)
            return cls()
        try:
            raw = json.loads(storage_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse coverage settings file {}: {}", storage_path, exc)
            return cls()
        except OSError as exc:
            logger.error("Unable to read coverage settings file {}: {}", storage_path, exc)
            return cls()

        if not isinstance(raw, dict):
            logger.error("Invalid coverage settings format; expected object at root")
            return cls()
        return cls.from_dict(raw)

    def save(self, path: Optional[Path] = None) -> None:
        storage_path = Path(path) if path else self.DEFAULT_PATH
        try:
            storage_path.parent.mkdir(parents=True, exist_ok=True)
            storage_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Unable to write coverage settings file {}: {}", storage_path, exc)
