"""Script coverage core for the chatbot rule editor."""

from .analysis import AnalysisStatus, AnalyzedLine, AnalyzedScript, mean_coverage
from .loader import load_rule_tree, load_scripts
from .resolver import (
    CoverageResolver,
    DisplayClass,
    LineView,
    RuleUsage,
    ScriptIndexError,
    classify,
    format_coverage,
    parse_topic,
    select_hint,
)
from .rules import Rule, RuleKind
from .settings import CoverageSettings

__all__ = [
    "AnalysisStatus",
    "AnalyzedLine",
    "AnalyzedScript",
    "mean_coverage",
    "load_rule_tree",
    "load_scripts",
    "CoverageResolver",
    "DisplayClass",
    "LineView",
    "RuleUsage",
    "ScriptIndexError",
    "classify",
    "format_coverage",
    "parse_topic",
    "select_hint",
    "Rule",
    "RuleKind",
    "CoverageSettings",
]
