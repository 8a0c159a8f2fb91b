from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class RuleKind(Enum):
    ORDINARY = "ordinary"
    EVASIVE = "evasive"
    CONTAINER = "container"

    @classmethod
    def parse(cls, value: Any) -> RuleKind:
        text = str(value or "ordinary").strip().lower()
        if text.endswith("rule"):
            text = text[: -len("rule")]
        try:
            return cls(text)
        except ValueError as exc:
            raise ValueError(f"Unknown rule kind '{value}'") from exc


@dataclass(slots=True, eq=False)
class Rule:
    """Node of the chatbot rule tree.

    Rules are owned by the editor; the coverage code only walks them.
    """

    id: int
    name: str = ""
    kind: RuleKind = RuleKind.ORDINARY
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    children: List[Rule] = field(default_factory=list)

    @property
    def is_evasive(self) -> bool:
        return self.kind is RuleKind.EVASIVE

    def add_child(self, child: Rule) -> Rule:
        self.children.append(child)
        return child

    def walk(self) -> Iterator[Rule]:
        """Yield this rule and all of its descendants in pre-order."""
        stack: List[Rule] = [self]
        while stack:
            rule = stack.pop()
            yield rule
            stack.extend(reversed(rule.children))

    def input_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.inputs):
            return self.inputs[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload = self._node_dict()
        stack: List[Tuple[Rule, Dict[str, Any]]] = [(self, payload)]
        while stack:
            rule, entry = stack.pop()
            for child in rule.children:
                child_entry = child._node_dict()
                entry["children"].append(child_entry)
                stack.append((child, child_entry))
        return payload

    def _node_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "children": [],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Rule:
        root = Rule._parse_node(data)
        stack: List[Tuple[Rule, Dict[str, Any]]] = [(root, data)]
        while stack:
            rule, raw = stack.pop()
            for raw_child in raw.get("children") or []:
                child = rule.add_child(Rule._parse_node(raw_child))
                stack.append((child, raw_child))
        return root

    @staticmethod
    def _parse_node(data: Dict[str, Any]) -> Rule:
        if not isinstance(data, dict):
            raise ValueError(f"Rule entry must be an object, got {type(data).__name__}")
        try:
            rule_id = int(data["id"])
        except KeyError as exc:
            raise ValueError("Rule entry is missing 'id'") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid rule id {data.get('id')!r}") from exc
        if rule_id <= 0:
            raise ValueError(f"Rule id must be a positive integer, got {rule_id}")

        return Rule(
            id=rule_id,
            name=str(data.get("name") or ""),
            kind=RuleKind.parse(data.get("kind") or data.get("type")),
            inputs=[str(item) for item in data.get("inputs") or []],
            outputs=[str(item) for item in data.get("outputs") or []],
        )
