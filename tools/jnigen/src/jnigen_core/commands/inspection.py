from __future__ import annotations

import argparse
import json

from ..core import *  # noqa: F401,F403


def command_parse(args: argparse.Namespace) -> int:
    source_path = Path(args.source).resolve()
    parsed = parse_java_source_with_diagnostics(read_text(source_path), str(source_path))

    segments: list[Any] = list(parsed.segments)
    if args.header:
        signatures = parse_jni_header(read_text(Path(args.header).resolve()))
        segments = correlate(parsed.segments, signatures, str(source_path))

    payload = {
        "source": str(source_path),
        "segments": [segment_to_dict(segment) for segment in segments],
        "warnings": list(parsed.warnings),
    }
    if args.output:
        write_json(Path(args.output).resolve(), payload)
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))
    return 0
