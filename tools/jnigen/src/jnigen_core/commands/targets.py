from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import resolve_repo_root


def command_list_targets(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config).resolve())
    for name in resolve_target_names(config=config, target_name=None):
        print(name)
    return 0


def command_validate_config(args: argparse.Namespace) -> int:
    repo_root = resolve_repo_root(args)
    config = load_config(ensure_relative_path(repo_root, args.config).resolve())

    missing = 0
    for name in resolve_target_names(config=config, target_name=None):
        target = resolve_target(config, name)
        source_root = ensure_relative_path(repo_root, str(target["source_dir"]))
        if source_root.is_dir():
            print(f"[{name}] source_dir: ok ({to_repo_relative(source_root, repo_root)})")
        else:
            missing += 1
            print(f"[{name}] source_dir: missing ({to_repo_relative(source_root, repo_root)})")
    return 1 if missing else 0
