#!/usr/bin/env python3
"""
Config guard — only new targets may be appended.

Compares the config file in the working tree with its previous revision
(git `main` by default) and fails the job unless the only change is new
elements appended to the "targets" section.

Inputs:
- the config file (positional, default config.prod.json)
- the unified diff produced by the CI job (diff_output.txt), embedded verbatim

Output:
- a Markdown report (log.md) and exit code 0 (allowed) / 1 (rejected)
"""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

from change_classifier import DEFAULT_SECTION, Verdict, classify
from report import DEFAULT_DIFF_PATH, DEFAULT_LOG_PATH, exit_code, read_diff_text, render_change_report, write_report
from revisions import FileRevisionProvider, GitRevisionProvider, RevisionProvider, load_document
from structural_diff import diff


DEFAULT_CONFIG_PATH = "config.prod.json"
DEFAULT_BASE_REF = "main"


def env_or(cli_value: Optional[str], env_name: str, default: str) -> str:
    """CLI value first, then environment variable, then default."""
    if cli_value:
        return cli_value
    return os.environ.get(env_name, "").strip() or default


def validate_config(config_path: str, provider: RevisionProvider, section: str = DEFAULT_SECTION) -> Verdict:
    old_config = provider.load(config_path)
    new_config = load_document(config_path)
    return classify(old_config, new_config, diff(old_config, new_config), section)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Allow only new targets to be appended to a config file.")
    parser.add_argument("config", nargs="?", default=DEFAULT_CONFIG_PATH, help="Config file to check.")
    parser.add_argument(
        "--base-ref",
        default=None,
        help="Git ref holding the previous revision. Falls back to CONFIG_GUARD_BASE_REF, then 'main'.",
    )
    parser.add_argument(
        "--old",
        default=None,
        help="Local file to use as the previous revision instead of git.",
    )
    parser.add_argument(
        "--diff-output",
        default=None,
        help="Unified diff to embed in the report. Falls back to CONFIG_GUARD_DIFF_OUTPUT, then diff_output.txt.",
    )
    parser.add_argument(
        "--log",
        default=None,
        help="Markdown report path. Falls back to CONFIG_GUARD_LOG, then log.md.",
    )
    parser.add_argument(
        "--section",
        default=None,
        help="Section that may only grow. Falls back to CONFIG_GUARD_SECTION, then 'targets'.",
    )
    args = parser.parse_args(argv)

    section = env_or(args.section, "CONFIG_GUARD_SECTION", DEFAULT_SECTION)
    diff_path = env_or(args.diff_output, "CONFIG_GUARD_DIFF_OUTPUT", DEFAULT_DIFF_PATH)
    log_path = env_or(args.log, "CONFIG_GUARD_LOG", DEFAULT_LOG_PATH)

    provider: RevisionProvider
    if args.old:
        provider = FileRevisionProvider(args.old)
    else:
        provider = GitRevisionProvider(env_or(args.base_ref, "CONFIG_GUARD_BASE_REF", DEFAULT_BASE_REF))

    verdict = validate_config(args.config, provider, section)
    write_report(log_path, render_change_report(verdict, read_diff_text(diff_path)))

    status = "OK" if verdict.ok else "FAIL"
    print(
        f"{status}: {verdict.message} | changes={len(verdict.all_changes)}"
        f" | out_of_scope={len(verdict.out_of_scope_changes)}"
        f" | disallowed={len(verdict.disallowed_target_changes)}"
    )
    print(f"OK: wrote {log_path}")
    return exit_code(verdict)


if __name__ == "__main__":
    raise SystemExit(main())
