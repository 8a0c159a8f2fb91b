"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Make the top-level packages importable without installation
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from clue import (  # noqa: E402
    AnalysisStatus,
    AnalyzedLine,
    AnalyzedScript,
    CoverageResolver,
    Rule,
    RuleKind,
)


@pytest.fixture
def rule_tree() -> Rule:
    """Root container with a greetings category, a farewell rule and the evasive rule."""
    root = Rule(id=1, name="Root", kind=RuleKind.CONTAINER)
    greetings = root.add_child(Rule(id=10, name="Greetings", kind=RuleKind.CONTAINER))
    greetings.add_child(
        Rule(id=5, name="Hello", inputs=["hello", "hi", "hey there"], outputs=["Hi!", "Hello!", "Hey"])
    )
    greetings.add_child(Rule(id=6, name="Good morning", inputs=["good morning"], outputs=["Morning!"]))
    root.add_child(Rule(id=7, name="Bye", inputs=["bye"], outputs=["See you"]))
    root.add_child(Rule(id=99, name="Evasives", kind=RuleKind.EVASIVE, outputs=["Sorry?"]))
    return root


@pytest.fixture
def example_script() -> AnalyzedScript:
    """Three lines: answered, wrong output and no match at all."""
    return AnalyzedScript(
        filename="greetings.txt",
        character="Suspect",
        coverage=33.3,
        lines=[
            AnalyzedLine(
                question="hi",
                answer="Hello!",
                rule_id=5,
                output_idx=2,
                input_idx=1,
                topic="10",
                status=AnalysisStatus.ANSWER_OK,
            ),
            AnalyzedLine(
                question="hey there",
                answer="Hey",
                rule_id=5,
                output_idx=-1,
                input_idx=2,
                topic="10",
                status=AnalysisStatus.MISMATCH_EXPECTED_ANSWER,
                exp_hint="try X",
            ),
            AnalyzedLine(
                question="what time is it",
                answer="",
                rule_id=0,
                output_idx=-1,
                topic="",
                status=AnalysisStatus.NO_ANSWER_FOUND,
                exp_hint="try Y",
            ),
        ],
    )


@pytest.fixture
def resolver(example_script: AnalyzedScript, rule_tree: Rule) -> CoverageResolver:
    """Resolver loaded with the example script plus an empty script."""
    resolver = CoverageResolver()
    empty = AnalyzedScript(filename="empty.txt", character="Nobody", coverage=None)
    resolver.load([example_script, empty], rule_tree)
    return resolver


@pytest.fixture
def scripts_payload() -> List[Dict[str, Any]]:
    """Analyzer output as it is saved to disk."""
    return [
        {
            "filename": "greetings.txt",
            "character": "Suspect",
            "coverage": 40,
            "lines": [
                {
                    "question": "hello",
                    "answer": "Hi!",
                    "ruleId": 5,
                    "inputIdx": 0,
                    "outputIdx": 0,
                    "topic": "10",
                    "status": "AnswerOk",
                },
                {
                    "question": "where were you",
                    "answer": "",
                    "ruleId": 0,
                    "inputIdx": -1,
                    "outputIdx": -1,
                    "topic": "0",
                    "status": 2,
                    "expHint": "Add an alibi rule",
                },
            ],
        },
        {"filename": "farewell.txt", "character": "Suspect", "coverage": 60, "lines": []},
    ]


@pytest.fixture
def scripts_file(tmp_path: Path, scripts_payload: List[Dict[str, Any]]) -> Path:
    path = tmp_path / "scripts.json"
    path.write_text(json.dumps(scripts_payload), encoding="utf-8")
    return path


@pytest.fixture
def rules_file(tmp_path: Path, rule_tree: Rule) -> Path:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(rule_tree.to_dict()), encoding="utf-8")
    return path
