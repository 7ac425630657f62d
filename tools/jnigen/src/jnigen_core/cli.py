from __future__ import annotations

import argparse
import sys

from .core import JniGenError
from .commands import (
    command_generate,
    command_generate_file,
    command_list_targets,
    command_parse,
    command_validate_config,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jnigen",
        description="Generate JNI C/C++ glue from Java sources with embedded native code.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Generate .cpp units for every configured target.")
    generate.add_argument(
        "--repo-root",
        default=".",
        help="Repository root used to resolve relative paths (default: current directory).",
    )
    generate.add_argument("--config", required=True, help="Path to jnigen config JSON.")
    generate.add_argument("--target", help="Optional target name. If omitted, all targets are processed.")
    generate.add_argument("--run-header-command", action="store_true", help="Run the target's header_command before correlating.")
    generate.add_argument("--dry-run", action="store_true", help="Do not write files; only compute outputs.")
    generate.add_argument("--check", action="store_true", help="Fail when generated units drift from files on disk.")
    generate.add_argument("--print-diff", action="store_true", help="Print unified diff for changed units.")
    generate.add_argument("--report-json", help="Write aggregate generation report JSON.")
    generate.set_defaults(func=command_generate)

    generate_file = sub.add_parser("generate-file", help="Generate one .cpp unit from a Java source and its JNI header.")
    generate_file.add_argument("--source", required=True, help="Java source file.")
    generate_file.add_argument("--header", required=True, help="JNI header produced for the class.")
    generate_file.add_argument("--output", required=True, help="Output .cpp path.")
    generate_file.add_argument("--header-include", help="Name used in the #include line (default: header file name).")
    generate_file.add_argument("--dry-run", action="store_true", help="Do not write files; only compute outputs.")
    generate_file.add_argument("--check", action="store_true", help="Fail when the output drifts from the file on disk.")
    generate_file.add_argument("--print-diff", action="store_true", help="Print unified diff for the changed unit.")
    generate_file.set_defaults(func=command_generate_file)

    parse = sub.add_parser("parse", help="Dump the segments of a Java source as JSON.")
    parse.add_argument("--source", required=True, help="Java source file.")
    parse.add_argument("--header", help="Optional JNI header; when given, segments are correlated.")
    parse.add_argument("--output", help="Write JSON to path instead of stdout.")
    parse.set_defaults(func=command_parse)

    list_targets = sub.add_parser("list-targets", help="List target names from config.")
    list_targets.add_argument("--config", required=True, help="Path to jnigen config JSON.")
    list_targets.set_defaults(func=command_list_targets)

    validate_config = sub.add_parser("validate-config", help="Validate config and check configured source directories.")
    validate_config.add_argument("--repo-root", default=".", help="Repository root for relative path resolution.")
    validate_config.add_argument("--config", required=True, help="Path to jnigen config JSON.")
    validate_config.set_defaults(func=command_validate_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return int(args.func(args))
    except JniGenError as exc:
        print(f"jnigen error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
