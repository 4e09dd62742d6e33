#!/usr/bin/env python3
"""
Markdown reports for the CI guards.

The rendered text is written to a single log artifact (log.md by default)
which the CI job posts back on the pull request.
"""

from __future__ import annotations

import json
import os
from typing import Any, Iterable, List

from change_classifier import Status, Verdict
from structural_diff import DiffEntry, DiffKind


DEFAULT_LOG_PATH = "log.md"
DEFAULT_DIFF_PATH = "diff_output.txt"

FENCE = "```"


def format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=False, separators=(", ", ": "))


def format_change(change: DiffEntry) -> str:
    """Render one entry as removed/added lines: `- path : old` / `+ path : new`."""
    path = change.display_path
    entry = change.item if change.kind is DiffKind.ARRAY and change.item is not None else change

    lines: List[str] = []
    if entry.kind in (DiffKind.EDIT, DiffKind.DELETE) and entry.has_lhs:
        lines.append(f"- {path} : {format_value(entry.lhs)}")
    if entry.kind in (DiffKind.EDIT, DiffKind.NEW) and entry.has_rhs:
        lines.append(f"+ {path} : {format_value(entry.rhs)}")
    return "\n".join(lines)


def _diff_block(body: str) -> str:
    return f"{FENCE}diff\n{body}\n{FENCE}\n"


def _change_section(title: str, changes: Iterable[DiffEntry]) -> str:
    body = "".join(format_change(c) + "\n" for c in changes)
    return f"\n### {title}\n" + _diff_block(body)


def render_change_report(verdict: Verdict, diff_text: str) -> str:
    if verdict.status is Status.SUCCESS:
        return f"## ✅ SUCCESS: {verdict.message}\n\n" + _diff_block(diff_text)

    log = f"## ❌ ERROR: {verdict.message}\n\n" + _diff_block(diff_text)
    if verdict.out_of_scope_changes:
        log += _change_section(
            f'❌ WARNING: Changes outside of "{verdict.section}" section:',
            verdict.out_of_scope_changes,
        )
    if verdict.disallowed_target_changes:
        log += _change_section(
            f'❌ ERROR: Editing or adding new fields to existing "{verdict.section}" section is not allowed:',
            verdict.disallowed_target_changes,
        )
    return log


def exit_code(verdict: Verdict) -> int:
    return 0 if verdict.status is Status.SUCCESS else 1


# ----------------------------
# Artifacts
# ----------------------------

def read_diff_text(path: str) -> str:
    # The diff artifact is produced by the CI job; a missing file is fatal.
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_report(path: str, text: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
