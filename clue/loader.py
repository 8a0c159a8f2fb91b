"""Read analyzer output and rule trees saved as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Set

from loguru import logger

from .analysis import AnalyzedScript
from .rules import Rule


def _read_json(path: Path) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def load_scripts(path: Path) -> List[AnalyzedScript]:
    raw = _read_json(path)
    if isinstance(raw, dict):
        raw = raw.get("scripts")
    if not isinstance(raw, list):
        raise ValueError(f"Invalid scripts file {path}; expected a list of scripts")

    scripts: List[AnalyzedScript] = []
    for index, entry in enumerate(raw):
        try:
            scripts.append(AnalyzedScript.from_dict(entry))
        except ValueError as exc:
            raise ValueError(f"Script #{index} in {path}: {exc}") from exc
    logger.debug("Read {} analyzed scripts from {}", len(scripts), path)
    return scripts


def load_rule_tree(path: Path) -> Rule:
    raw = _read_json(path)
    if isinstance(raw, dict) and "root" in raw:
        raw = raw["root"]
    root = Rule.from_dict(raw)

    seen: Set[int] = set()
    for rule in root.walk():
        if rule.id in seen:
            raise ValueError(f"Duplicate rule id {rule.id} in {path}")
        seen.add(rule.id)
    logger.debug("Read rule tree with {} rules from {}", len(seen), path)
    return root
