from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403


def resolve_repo_root(args: argparse.Namespace) -> Path:
    repo_root = Path(getattr(args, "repo_root", None) or ".").resolve()
    if not repo_root.is_dir():
        raise JniGenError(f"Repository root '{repo_root}' does not exist")
    return repo_root


def print_generation_summary(aggregate: dict[str, Any]) -> None:
    summary = aggregate["summary"]
    print(
        f"generated {summary['file_count']} file(s) across {summary['target_count']} target(s): "
        f"{summary['updated_count']} updated, {summary['unchanged_count']} unchanged, "
        f"{summary['would_write_count']} pending, "
        f"{summary['drift_count']} drifted, {summary['warning_count']} warning(s)"
    )
