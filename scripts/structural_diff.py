#!/usr/bin/env python3
"""
Structural diff between two parsed JSON documents.

Produces an ordered list of typed entries in the deep-diff notation:
- E: a value changed at an existing path
- N: a key appeared that did not exist before
- D: a key existed and was removed
- A: an array grew or shrank; `index` + `item` describe the element

Path segments keep their structural type: object keys are `str`, array indices
are `int`. A key spelled "0" is never confused with index 0.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


Segment = Union[str, int]
Path = Tuple[Segment, ...]


class DiffKind(str, Enum):
    EDIT = "E"
    NEW = "N"
    DELETE = "D"
    ARRAY = "A"


_MISSING = object()


@dataclass(frozen=True)
class DiffEntry:
    kind: DiffKind
    path: Path
    lhs: Any = _MISSING
    rhs: Any = _MISSING
    index: Optional[int] = None
    item: Optional["DiffEntry"] = None

    @property
    def has_lhs(self) -> bool:
        return self.lhs is not _MISSING

    @property
    def has_rhs(self) -> bool:
        return self.rhs is not _MISSING

    @property
    def full_path(self) -> Path:
        if self.kind is DiffKind.ARRAY and self.index is not None:
            return self.path + (self.index,)
        return self.path

    @property
    def display_path(self) -> str:
        return ".".join(str(p) for p in self.full_path)

    def to_dict(self) -> dict:
        d: dict = {"kind": self.kind.value, "path": list(self.path)}
        if self.has_lhs:
            d["lhs"] = self.lhs
        if self.has_rhs:
            d["rhs"] = self.rhs
        if self.kind is DiffKind.ARRAY:
            d["index"] = self.index
            d["item"] = self.item.to_dict() if self.item else None
        return d

    def __repr__(self) -> str:
        return f"DiffEntry({json.dumps(self.to_dict(), ensure_ascii=False, default=str)})"


# ----------------------------
# Comparison helpers
# ----------------------------

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _same_scalar(a: Any, b: Any) -> bool:
    # JSON has a single number type; 1 and 1.0 are the same value, True and 1 are not.
    if _is_number(a) and _is_number(b):
        return a == b
    return type(a) is type(b) and a == b


def _field(key: Any) -> str:
    # Object keys are field names even when a YAML document uses non-string keys.
    return key if isinstance(key, str) else str(key)


def _fields(mapping: dict, path: Path) -> Dict[str, Any]:
    """Mapping keyed by field name; two keys with the same name are an error."""
    fields: Dict[str, Any] = {}
    raw: Dict[str, Any] = {}
    for key, value in mapping.items():
        name = _field(key)
        if name in fields:
            where = ".".join(str(p) for p in path + (name,))
            raise ValueError(f"Ambiguous keys {raw[name]!r} and {key!r} at {where}")
        fields[name] = value
        raw[name] = key
    return fields


def _walk(lhs: Any, rhs: Any, path: Path, out: List[DiffEntry]) -> None:
    if isinstance(lhs, dict) and isinstance(rhs, dict):
        old_fields = _fields(lhs, path)
        new_fields = _fields(rhs, path)
        for name, old_value in old_fields.items():
            if name in new_fields:
                _walk(old_value, new_fields[name], path + (name,), out)
            else:
                out.append(DiffEntry(DiffKind.DELETE, path + (name,), lhs=old_value))
        for name, new_value in new_fields.items():
            if name not in old_fields:
                out.append(DiffEntry(DiffKind.NEW, path + (name,), rhs=new_value))
        return

    if isinstance(lhs, list) and isinstance(rhs, list):
        common = min(len(lhs), len(rhs))
        for i in range(common):
            _walk(lhs[i], rhs[i], path + (i,), out)
        for i in range(common, len(rhs)):
            out.append(DiffEntry(DiffKind.ARRAY, path, index=i, item=DiffEntry(DiffKind.NEW, (), rhs=rhs[i])))
        for i in range(len(lhs) - 1, common - 1, -1):
            out.append(DiffEntry(DiffKind.ARRAY, path, index=i, item=DiffEntry(DiffKind.DELETE, (), lhs=lhs[i])))
        return

    # Container vs scalar, or dict vs list: always a replacement.
    if isinstance(lhs, (dict, list)) or isinstance(rhs, (dict, list)) or not _same_scalar(lhs, rhs):
        out.append(DiffEntry(DiffKind.EDIT, path, lhs=lhs, rhs=rhs))


def diff(old: Any, new: Any) -> List[DiffEntry]:
    """Return the ordered structural differences from `old` to `new` (empty if identical)."""
    out: List[DiffEntry] = []
    _walk(old, new, (), out)
    return out
