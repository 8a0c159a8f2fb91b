from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from clue import (
    CoverageResolver,
    CoverageSettings,
    DisplayClass,
    ScriptIndexError,
    load_rule_tree,
    load_scripts,
)

_CLASS_LABELS = {
    DisplayClass.MATCHED: "OK",
    DisplayClass.MATCHED_WRONG_OUTPUT: "WRONG OUTPUT",
    DisplayClass.NO_MATCH: "NO MATCH",
}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Summarise the coverage of analyzed conversation scripts against a rule tree.",
    )
    parser.add_argument(
        "--scripts",
        type=Path,
        required=True,
        help="Path to the analyzed scripts JSON produced by the analyzer.",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Path to the rule tree JSON. Without it every rule lookup reports not found.",
    )
    parser.add_argument(
        "--script",
        type=int,
        default=None,
        help="Index of a script whose lines should be listed with rule, category and hint.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Optional coverage settings JSON (labels, category display).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging for troubleshooting.",
    )
    return parser.parse_args(argv)


def print_line_details(resolver: CoverageResolver, script_index: int) -> None:
    script = resolver.script(script_index)
    print(f"Script '{script.filename}' ({resolver.coverage_text(script_index)}):")
    views = resolver.script_lines(script_index)
    if not views:
        print("  (Empty script)")
        return

    for view in views:
        usage = resolver.rule_usage(script_index, view.line_index)
        label = _CLASS_LABELS[view.display_class]
        print(f"  {view.line_index + 1}. [{label}] {view.speaker}: {view.question}")
        print(f"     {view.character}: {view.answer}")
        rule_name = usage.rule.name if usage.rule else "(not found)"
        print(f"     Rule: {rule_name}")
        if usage.matched_input is not None:
            print(f"     Matched input #{usage.input_idx}: {usage.matched_input}")
        if resolver.settings.show_categories:
            print(f"     Category: {usage.category_label}")
        if usage.hint:
            print(f"     Hint: {usage.hint}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        scripts = load_scripts(args.scripts)
        root = load_rule_tree(args.rules) if args.rules else None
    except FileNotFoundError as exc:
        raise SystemExit(f"File not found: {exc.filename}") from exc
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    settings = CoverageSettings.load(args.settings) if args.settings else CoverageSettings()
    resolver = CoverageResolver(settings=settings)
    resolver.load(scripts, root)

    if resolver.script_count() == 0:
        print("No analyzed scripts found.")
        return 1

    print(f"Global coverage: {resolver.coverage_text()}")
    for index in range(resolver.script_count()):
        script = resolver.script(index)
        print(f"  {script.filename:<40} {resolver.coverage_text(index)}")

    if args.script is not None:
        print()
        try:
            print_line_details(resolver, args.script)
        except ScriptIndexError as exc:
            print(f"Error: {exc}")
            return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
