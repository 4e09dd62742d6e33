#!/usr/bin/env python3
"""
Change classification for configuration pull requests.

Rule: the only change allowed is appending brand-new elements to the
designated section (default "targets"). Everything else is rejected:
- changes outside the section (scope violation)
- edits, added fields or removals on existing elements (mutation violation)
- no change at all (vacuous change)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from structural_diff import DiffEntry, DiffKind, Path


DEFAULT_SECTION = "targets"


class Status(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Verdict:
    status: Status
    message: str
    all_changes: Tuple[DiffEntry, ...]
    out_of_scope_changes: Tuple[DiffEntry, ...] = ()
    disallowed_target_changes: Tuple[DiffEntry, ...] = ()
    section: str = DEFAULT_SECTION

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS


# ----------------------------
# Path helpers
# ----------------------------

def section_offset(path: Path, section: str) -> Optional[int]:
    """Index of the first field-name segment equal to `section`, or None.

    Only `str` segments match; an array index never names a section.
    """
    for i, seg in enumerate(path):
        if isinstance(seg, str) and seg == section:
            return i
    return None


def _trailing(path: Path, section: str) -> Path:
    offset = section_offset(path, section)
    return path[offset + 1:] if offset is not None else ()


def _is_index(seg: Any) -> bool:
    return isinstance(seg, int) and not isinstance(seg, bool)


def touches_named_field(path: Path, section: str) -> bool:
    return any(not _is_index(seg) for seg in _trailing(path, section))


def is_pure_append(change: DiffEntry, section: str) -> bool:
    if change.kind is not DiffKind.ARRAY or change.item is None:
        return False
    if change.item.kind is not DiffKind.NEW:
        return False
    return not touches_named_field(change.full_path, section)


def is_disallowed(change: DiffEntry, section: str) -> bool:
    """True when a change inside the section mutates something that already existed."""
    if change.kind in (DiffKind.EDIT, DiffKind.NEW):
        if touches_named_field(change.full_path, section):
            return True
        # Index-only path: an existing element replaced wholesale.
        return change.kind is DiffKind.EDIT
    if change.kind is DiffKind.DELETE:
        return True
    return not is_pure_append(change, section)


# ----------------------------
# Classification
# ----------------------------

def partition(changes: Iterable[DiffEntry], section: str = DEFAULT_SECTION) -> Tuple[List[DiffEntry], List[DiffEntry]]:
    """Split changes into (inside section, outside section), preserving order."""
    inside: List[DiffEntry] = []
    outside: List[DiffEntry] = []
    for change in changes:
        if section_offset(change.full_path, section) is not None:
            inside.append(change)
        else:
            outside.append(change)
    return inside, outside


def classify(old: Any, new: Any, changes: Iterable[DiffEntry], section: str = DEFAULT_SECTION) -> Verdict:
    """
    Derive the verdict for a pre-computed diff between `old` and `new`.

    The documents themselves are not inspected; segment types in the diff
    decide between array appends and field edits.
    """
    all_changes = tuple(changes)
    target_changes, out_of_scope = partition(all_changes, section)
    disallowed = tuple(c for c in target_changes if is_disallowed(c, section))

    if out_of_scope or not all_changes:
        return Verdict(
            status=Status.ERROR,
            message=f'Changes outside of "{section}" or no changes detected.',
            all_changes=all_changes,
            out_of_scope_changes=tuple(out_of_scope),
            disallowed_target_changes=disallowed,
            section=section,
        )
    if disallowed:
        return Verdict(
            status=Status.ERROR,
            message=f'Editing or adding new fields to existing "{section}" is not allowed.',
            all_changes=all_changes,
            disallowed_target_changes=disallowed,
            section=section,
        )
    if target_changes:
        return Verdict(
            status=Status.SUCCESS,
            message=f"Only new {section} have been added, with no modifications to existing ones.",
            all_changes=all_changes,
            section=section,
        )
    return Verdict(
        status=Status.ERROR,
        message="No allowed changes detected.",
        all_changes=all_changes,
        section=section,
    )
