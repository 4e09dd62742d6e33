#!/usr/bin/env python3
"""
Schema gate — validate a config document against a JSON Schema (draft 2020-12).

All errors are collected (not just the first) and listed per instance path
in the Markdown report.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

import jsonschema

from report import DEFAULT_LOG_PATH, write_report
from revisions import load_document


@dataclass(frozen=True)
class SchemaIssue:
    instance_path: str
    message: str


def json_pointer(path: Iterable[Any]) -> str:
    """RFC 6901 pointer for an error path ("" for the document root)."""
    return "".join("/" + str(p).replace("~", "~0").replace("/", "~1") for p in path)


def validate_document(schema: Any, data: Any) -> List[SchemaIssue]:
    # An invalid schema is an infrastructure failure, not a finding.
    jsonschema.Draft202012Validator.check_schema(schema)
    validator = jsonschema.Draft202012Validator(schema, format_checker=jsonschema.FormatChecker())
    issues = [SchemaIssue(json_pointer(e.absolute_path), e.message) for e in validator.iter_errors(data)]
    return sorted(issues, key=lambda i: (i.instance_path, i.message))


def render_schema_report(issues: List[SchemaIssue]) -> str:
    if not issues:
        return "## ✅ SUCCESS: Check Schema test passed \n\n"

    log = "## ❌ ERROR: Check Schema test failed \n\n"
    log += "### Details:\n\n"
    log += "```diff\n"
    for issue in issues:
        log += f"- {issue.instance_path} {issue.message}\n"
    log += "\n```\n"
    return log


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a config document against a JSON Schema.")
    parser.add_argument("schema", help="JSON Schema file.")
    parser.add_argument("data", help="Config document to validate (JSON or YAML).")
    parser.add_argument(
        "--log",
        default=None,
        help="Markdown report path. Falls back to CONFIG_GUARD_LOG, then log.md.",
    )
    args = parser.parse_args(argv)

    log_path = args.log or os.environ.get("CONFIG_GUARD_LOG", "").strip() or DEFAULT_LOG_PATH

    issues = validate_document(load_document(args.schema), load_document(args.data))
    write_report(log_path, render_schema_report(issues))

    if issues:
        print(f"FAIL: {len(issues)} schema error(s) in {args.data}")
        for issue in issues:
            print(f"  {issue.instance_path or '/'}: {issue.message}")
        return 1

    print(f"OK: {args.data} conforms to {args.schema}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
