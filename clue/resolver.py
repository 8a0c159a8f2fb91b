from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from PyQt6.QtCore import QObject, pyqtSignal
from loguru import logger

from .analysis import AnalysisStatus, AnalyzedLine, AnalyzedScript, mean_coverage
from .rules import Rule
from .settings import CoverageSettings


class DisplayClass(Enum):
    """Colour coding of a script line in the coverage view."""

    MATCHED = "ok"
    MATCHED_WRONG_OUTPUT = "error"
    NO_MATCH = "severe"


class ScriptIndexError(IndexError):
    """Raised when a script or line index does not exist in the loaded batch."""


@dataclass(slots=True, frozen=True)
class LineView:
    script_index: int
    line_index: int
    speaker: str
    question: str
    character: str
    answer: str
    display_class: DisplayClass

    @property
    def anchor(self) -> str:
        return f"{self.script_index},{self.line_index}"


@dataclass(slots=True, frozen=True)
class RuleUsage:
    """What the rule panel shows for one selected script line."""

    rule: Optional[Rule]
    input_idx: int
    matched_input: Optional[str]
    category: Optional[Rule]
    category_label: str
    hint: str


def classify(line: AnalyzedLine) -> DisplayClass:
    # Driven by output/rule fields only; status is used for hints.
    if line.output_idx != -1:
        return DisplayClass.MATCHED
    if line.rule_id != 0:
        return DisplayClass.MATCHED_WRONG_OUTPUT
    return DisplayClass.NO_MATCH


def select_hint(line: AnalyzedLine) -> str:
    if line.status in (AnalysisStatus.NO_ANSWER_FOUND, AnalysisStatus.MISMATCH_EXPECTED_ANSWER):
        return line.exp_hint
    if line.status is AnalysisStatus.MATCH_FORBIDDEN_ANSWER:
        return line.forbid_hint
    return ""


def parse_topic(topic: Optional[str]) -> int:
    """Convert a line topic to a category rule id, 0 meaning no category."""
    text = (topic or "").strip()
    if not (text.isascii() and text.isdecimal()):
        return 0
    return int(text)


def format_coverage(value: Optional[float], undefined_label: str = "-") -> str:
    if value is None:
        return undefined_label
    return f"{int(value)}%"


class CoverageResolver(QObject):
    """
    Holds the latest batch of analyzed scripts together with the rule tree
    they were analyzed against, and answers the queries of the coverage view.

    The rule tree is borrowed: lookups always walk the current root and no
    rule references are kept between calls, so a ``load`` or ``clear`` never
    leaves stale rules behind.
    """

    batch_loaded = pyqtSignal(int)
    cleared = pyqtSignal()

    def __init__(
        self,
        settings: Optional[CoverageSettings] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or CoverageSettings()
        self._lock = threading.RLock()
        self._scripts: Tuple[AnalyzedScript, ...] = ()
        self._root: Optional[Rule] = None
        self._global_coverage: Optional[float] = None

    @property
    def settings(self) -> CoverageSettings:
        return self._settings

    @property
    def root(self) -> Optional[Rule]:
        with self._lock:
            return self._root

    # --------------------------------------------------------------- lifecycle
    def load(self, scripts: Sequence[AnalyzedScript], root: Optional[Rule]) -> None:
        """Replace the batch and rule tree in one step."""
        batch = tuple(scripts)
        global_coverage = mean_coverage(batch)
        with self._lock:
            self._scripts = batch
            self._root = root
            self._global_coverage = global_coverage
        logger.debug(
            "Loaded {} analyzed scripts (global coverage={}, rules={})",
            len(batch),
            format_coverage(global_coverage),
            "yes" if root is not None else "none",
        )
        self.batch_loaded.emit(len(batch))

    def clear(self) -> None:
        with self._lock:
            self._scripts = ()
            self._root = None
            self._global_coverage = None
        logger.debug("Coverage batch cleared")
        self.cleared.emit()

    # ---------------------------------------------------------------- accessors
    def script_count(self) -> int:
        with self._lock:
            return len(self._scripts)

    def script(self, script_index: int) -> AnalyzedScript:
        with self._lock:
            if not 0 <= script_index < len(self._scripts):
                logger.error("Invalid script index {} (scripts={})", script_index, len(self._scripts))
                raise ScriptIndexError(f"Script index {script_index} out of range")
            return self._scripts[script_index]

    def line_count(self, script_index: int) -> int:
        return len(self.script(script_index))

    def line(self, script_index: int, line_index: int) -> AnalyzedLine:
        with self._lock:
            script = self.script(script_index)
            if not 0 <= line_index < len(script):
                logger.error("Invalid indices {} {}", script_index, line_index)
                raise ScriptIndexError(
                    f"Line index {line_index} out of range for script {script_index}"
                )
            return script[line_index]

    def global_coverage(self) -> Optional[float]:
        with self._lock:
            return self._global_coverage

    def script_coverage(self, script_index: int) -> Optional[float]:
        return self.script(script_index).coverage

    # ------------------------------------------------------------------ queries
    def classify_line(self, script_index: int, line_index: int) -> DisplayClass:
        return classify(self.line(script_index, line_index))

    def select_hint(self, line: AnalyzedLine) -> str:
        return select_hint(line)

    def resolve_rule(self, rule_id: int) -> Optional[Rule]:
        """
        Return the first rule in pre-order whose id is ``rule_id``.

        A ``rule_id`` of 0 asks for the evasive rule instead.
        """
        with self._lock:
            if self._root is None:
                return None
            for rule in self._root.walk():
                if rule_id != 0:
                    if rule.id == rule_id:
                        return rule
                elif rule.is_evasive:
                    return rule
            return None

    def resolve_category(self, topic: Optional[str]) -> Optional[Rule]:
        category_id = parse_topic(topic)
        if category_id == 0:
            return None
        return self.resolve_rule(category_id)

    # ------------------------------------------------------------ presentation
    def script_lines(self, script_index: int) -> List[LineView]:
        with self._lock:
            script = self.script(script_index)
            return [
                LineView(
                    script_index=script_index,
                    line_index=line_index,
                    speaker=self._settings.speaker_label,
                    question=line.question,
                    character=script.character,
                    answer=line.answer,
                    display_class=classify(line),
                )
                for line_index, line in enumerate(script)
            ]

    def rule_usage(self, script_index: int, line_index: int) -> RuleUsage:
        with self._lock:
            line = self.line(script_index, line_index)
            rule = self.resolve_rule(line.rule_id)

            if self._settings.show_categories:
                category = self.resolve_category(line.topic)
                category_label = category.name if category else self._settings.no_category_label
            else:
                category = None
                category_label = ""

            return RuleUsage(
                rule=rule,
                input_idx=line.input_idx,
                matched_input=rule.input_at(line.input_idx) if rule else None,
                category=category,
                category_label=category_label,
                hint=select_hint(line),
            )

    def coverage_text(self, script_index: Optional[int] = None) -> str:
        value = self.global_coverage() if script_index is None else self.script_coverage(script_index)
        return format_coverage(value, self._settings.undefined_coverage_label)
