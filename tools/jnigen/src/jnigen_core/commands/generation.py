from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import print_generation_summary, resolve_repo_root


def command_generate(args: argparse.Namespace) -> int:
    repo_root = resolve_repo_root(args)
    config = load_config(ensure_relative_path(repo_root, args.config).resolve())
    target_names = resolve_target_names(config=config, target_name=args.target)

    aggregate: dict[str, Any] = {
        "tool": {"name": "jnigen", "version": TOOL_VERSION},
        "results": {},
        "summary": {
            "target_count": len(target_names),
            "file_count": 0,
            "updated_count": 0,
            "unchanged_count": 0,
            "would_write_count": 0,
            "drift_count": 0,
            "warning_count": 0,
        },
    }
    exit_code = 0

    for target_name in target_names:
        result = build_generation_for_target(
            repo_root=repo_root,
            config=config,
            target_name=target_name,
            dry_run=args.dry_run,
            check=args.check,
            print_diff=args.print_diff,
            run_header_command=args.run_header_command,
        )
        aggregate["results"][target_name] = result

        summary = aggregate["summary"]
        for item in result["files"]:
            summary["file_count"] += 1
            summary["warning_count"] += len(item["warnings"])
            if item["status"] == "updated":
                summary["updated_count"] += 1
            elif item["status"] == "unchanged":
                summary["unchanged_count"] += 1
            elif item["status"] == "would_write":
                summary["would_write_count"] += 1
            else:
                summary["drift_count"] += 1

        if args.check and result["has_drift"]:
            exit_code = 1

    print_generation_summary(aggregate)
    if args.report_json:
        write_json(Path(args.report_json).resolve(), aggregate)
    return exit_code


def command_generate_file(args: argparse.Namespace) -> int:
    source_path = Path(args.source).resolve()
    header_path = Path(args.header).resolve()
    output_path = Path(args.output).resolve()

    unit = generate_compilation_unit(
        java_source=read_text(source_path),
        header_source=read_text(header_path),
        header_name=args.header_include or header_path.name,
        path=str(source_path),
    )
    status, diff = write_artifact_if_changed(path=output_path, content=unit.content, dry_run=args.dry_run, check=args.check)
    print(f"generate-file: {output_path} ({status})")
    for warning in unit.warnings:
        print(f"  warning: {warning}")
    if args.print_diff and diff:
        print(diff)
    if args.check and status == "drift":
        return 1
    return 0
