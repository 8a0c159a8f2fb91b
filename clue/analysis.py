from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from loguru import logger

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class AnalysisStatus(IntEnum):
    """Per-line outcome reported by the script analyzer."""

    NOT_ANALYZED = 0
    ANSWER_OK = 1
    NO_ANSWER_FOUND = 2
    MISMATCH_EXPECTED_ANSWER = 3
    MATCH_FORBIDDEN_ANSWER = 4

    @classmethod
    def parse(cls, value: Any) -> AnalysisStatus:
        if isinstance(value, AnalysisStatus):
            return value
        if value is None or value == "":
            return cls.NOT_ANALYZED
        try:
            if isinstance(value, int) and not isinstance(value, bool):
                return cls(value)
            text = str(value).strip()
            if text.isdigit():
                return cls(int(text))
            return cls[_CAMEL_BOUNDARY.sub("_", text).upper()]
        except (KeyError, ValueError):
            logger.warning("Unknown analysis status {!r}; treating as not analyzed", value)
            return cls.NOT_ANALYZED


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(slots=True)
class AnalyzedLine:
    question: str
    answer: str
    rule_id: int = 0
    output_idx: int = -1
    input_idx: int = -1
    topic: str = ""
    status: AnalysisStatus = AnalysisStatus.NOT_ANALYZED
    exp_hint: str = ""
    forbid_hint: str = ""

    @property
    def answered(self) -> bool:
        return self.output_idx != -1

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> AnalyzedLine:
        if not isinstance(data, dict):
            raise ValueError(f"Script line must be an object, got {type(data).__name__}")
        try:
            line = AnalyzedLine(
                question=str(_pick(data, "question", default="")),
                answer=str(_pick(data, "answer", default="")),
                rule_id=int(_pick(data, "ruleId", "rule_id", default=0)),
                output_idx=int(_pick(data, "outputIdx", "output_idx", default=-1)),
                input_idx=int(_pick(data, "inputIdx", "input_idx", default=-1)),
                topic=str(_pick(data, "topic", default="")),
                status=AnalysisStatus.parse(_pick(data, "status")),
                exp_hint=str(_pick(data, "expHint", "exp_hint", default="")),
                forbid_hint=str(_pick(data, "forbidHint", "forbid_hint", default="")),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid script line {data!r}: {exc}") from exc

        if line.status is AnalysisStatus.NO_ANSWER_FOUND and line.answered:
            raise ValueError(
                f"Line '{line.question}' is marked as unanswered but selected output {line.output_idx}"
            )
        return line


@dataclass(slots=True)
class AnalyzedScript:
    filename: str
    character: str = ""
    coverage: Optional[float] = None
    lines: List[AnalyzedLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> AnalyzedLine:
        return self.lines[index]

    def __iter__(self) -> Iterator[AnalyzedLine]:
        return iter(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> AnalyzedScript:
        if not isinstance(data, dict):
            raise ValueError(f"Script entry must be an object, got {type(data).__name__}")

        raw_coverage = data.get("coverage")
        try:
            coverage = float(raw_coverage) if raw_coverage is not None else None
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid coverage {raw_coverage!r}") from exc
        if coverage is not None and not 0.0 <= coverage <= 100.0:
            raise ValueError(f"Coverage must be within [0, 100], got {coverage}")

        return AnalyzedScript(
            filename=str(data.get("filename") or ""),
            character=str(data.get("character") or ""),
            coverage=coverage,
            lines=[AnalyzedLine.from_dict(entry) for entry in data.get("lines") or []],
        )


def mean_coverage(scripts: Iterable[AnalyzedScript]) -> Optional[float]:
    """Average of the defined per-script coverages, ``None`` if there are none."""
    values = [script.coverage for script in scripts if script.coverage is not None]
    if not values:
        return None
    return sum(values) / len(values)
