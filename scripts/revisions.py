#!/usr/bin/env python3
"""
Document loading and previous-revision lookup.

The previous revision of the config is normally read from git
(`git show <ref>:<path>`); a local file can stand in for it.
"""

from __future__ import annotations

import json
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Optional

import yaml


YAML_SUFFIXES = (".yml", ".yaml")


class RevisionError(RuntimeError):
    """The previous revision could not be retrieved."""


def parse_document(text: str, name: str = "") -> Any:
    # git show output keeps a UTF-8 BOM that utf-8-sig file reads drop.
    text = text.lstrip("\ufeff")
    if name.lower().endswith(YAML_SUFFIXES):
        return yaml.safe_load(text)
    return json.loads(text)


def load_document(path: str) -> Any:
    with open(path, "r", encoding="utf-8-sig") as f:
        return parse_document(f.read(), path)


class RevisionProvider(ABC):
    @abstractmethod
    def load(self, path: str) -> Any:
        """Return the parsed previous revision of the document at `path`."""


class GitRevisionProvider(RevisionProvider):
    def __init__(self, ref: str = "main", cwd: Optional[str] = None) -> None:
        self.ref = ref
        self.cwd = cwd

    def show(self, path: str) -> str:
        rev_path = f"{self.ref}:{path.replace(os.sep, '/')}"
        proc = subprocess.run(
            ["git", "show", rev_path],
            cwd=self.cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )
        if proc.returncode != 0:
            raise RevisionError(f"git show {rev_path} failed: {proc.stderr.strip() or 'unknown error'}")
        return proc.stdout

    def load(self, path: str) -> Any:
        return parse_document(self.show(path), path)


class FileRevisionProvider(RevisionProvider):
    """Previous revision taken from a local file, whatever `path` is asked for."""

    def __init__(self, old_path: str) -> None:
        self.old_path = old_path

    def load(self, path: str) -> Any:
        return load_document(self.old_path)
