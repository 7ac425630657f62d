from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ._core_base import *  # noqa: F401,F403
from ._core_correlate import MatchedDeclaration, MatchedSegment, correlate, declaration_token
from ._core_emit import emit_compilation_unit, requires_decomposition
from ._core_header import parse_jni_header
from ._core_java import Declaration, RawBlock, Segment, parse_java_source_with_diagnostics


@dataclass(frozen=True)
class GeneratedUnit:
    segments: tuple[MatchedSegment, ...]
    content: str
    warnings: tuple[str, ...]


def generate_compilation_unit(
    java_source: str,
    header_source: str,
    header_name: str,
    path: str | None = None,
) -> GeneratedUnit:
    parsed = parse_java_source_with_diagnostics(java_source, path)
    signatures = parse_jni_header(header_source)
    matched = correlate(parsed.segments, signatures, path)
    content = emit_compilation_unit(matched, header_name)
    return GeneratedUnit(segments=tuple(matched), content=content, warnings=parsed.warnings)


def segment_to_dict(segment: Segment | MatchedSegment) -> dict[str, Any]:
    if isinstance(segment, RawBlock):
        return {
            "kind": "raw_block",
            "start_line": segment.start_line,
            "native_code": segment.native_code,
        }

    if isinstance(segment, MatchedDeclaration):
        declaration: Declaration = segment.declaration
        signature = segment.signature
    else:
        declaration = segment
        signature = None

    payload: dict[str, Any] = {
        "kind": "declaration",
        "class_name": declaration.class_name,
        "method_name": declaration.method_name,
        "token": declaration_token(declaration),
        "is_static": declaration.is_static,
        "arguments": [
            {
                "name": arg.name,
                "java_type": arg.type.java_type,
                "category": arg.type.category,
                "c_pointer_type": arg.type.c_pointer_type,
            }
            for arg in declaration.arguments
        ],
        "start_line": declaration.start_line,
        "end_line": declaration.end_line,
        "signature_line": declaration.signature_line,
        "requires_decomposition": requires_decomposition(declaration),
        "native_code": declaration.native_code,
    }
    if signature is not None:
        payload["signature"] = {
            "head": signature.head,
            "argument_c_types": list(signature.argument_c_types),
            "return_c_type": signature.return_c_type,
            "line": signature.line,
        }
    return payload


def fully_qualified_class_name(source_root: Path, source: Path) -> str:
    relative = source.resolve().relative_to(source_root.resolve())
    return ".".join(relative.with_suffix("").parts)


def discover_java_sources(source_root: Path, includes: list[str], excludes: list[str]) -> list[Path]:
    if not source_root.is_dir():
        raise JniGenError(f"Java source directory '{source_root}' does not exist")

    sources: list[Path] = []
    for candidate in sorted(source_root.rglob("*.java")):
        if not candidate.is_file():
            continue
        relative = candidate.relative_to(source_root)
        if any(part in VCS_DIRECTORY_NAMES for part in relative.parts):
            continue
        relative_text = relative.as_posix()
        if includes and not matches_any(relative_text, includes):
            continue
        if excludes and matches_any(relative_text, excludes):
            continue
        sources.append(candidate)
    return sources


def render_artifact_name(template: str, class_name: str) -> str:
    return template.replace("{class_name}", class_name)


def run_header_command_for_source(
    *,
    repo_root: Path,
    target: dict[str, Any],
    source: Path,
    class_name: str,
    jni_dir: Path,
    header_path: Path,
) -> None:
    template = normalize_string_list(target.get("header_command"), "header_command")
    class_dir = target.get("class_dir")
    replacements = {
        "repo_root": str(repo_root),
        "source": str(source),
        "class_name": class_name,
        "jni_dir": str(jni_dir),
        "header": str(header_path),
        "class_dir": str(ensure_relative_path(repo_root, class_dir).resolve()) if isinstance(class_dir, str) else "",
    }
    jni_dir.mkdir(parents=True, exist_ok=True)
    run_command(render_command(template, replacements), cwd=repo_root)


def build_generation_for_target(
    *,
    repo_root: Path,
    config: dict[str, Any],
    target_name: str,
    dry_run: bool,
    check: bool,
    print_diff: bool,
    run_header_command: bool,
) -> dict[str, Any]:
    target = resolve_target(config, target_name)
    source_root = ensure_relative_path(repo_root, str(target["source_dir"])).resolve()
    jni_dir = ensure_relative_path(repo_root, str(target["jni_dir"])).resolve()
    includes = normalize_string_list(target.get("includes"), "includes")
    excludes = normalize_string_list(target.get("excludes"), "excludes")
    header_template = str(target.get("header_name") or DEFAULT_HEADER_NAME)
    output_template = str(target.get("output_name") or DEFAULT_OUTPUT_NAME)

    if run_header_command and not target.get("header_command"):
        raise JniGenError(f"target '{target_name}' has no 'header_command' configured")

    files: list[dict[str, Any]] = []
    for source in discover_java_sources(source_root, includes, excludes):
        source_rel = to_repo_relative(source, repo_root)
        java_source = read_text(source)
        if NATIVE_MARKER not in java_source:
            continue

        class_name = fully_qualified_class_name(source_root, source)
        header_path = jni_dir / render_artifact_name(header_template, class_name)
        output_path = jni_dir / render_artifact_name(output_template, class_name)

        if run_header_command:
            run_header_command_for_source(
                repo_root=repo_root,
                target=target,
                source=source,
                class_name=class_name,
                jni_dir=jni_dir,
                header_path=header_path,
            )
        if not header_path.exists():
            raise JniGenError(
                f"JNI header '{to_repo_relative(header_path, repo_root)}' for '{source_rel}' does not exist; "
                "generate it first or pass --run-header-command"
            )

        unit = generate_compilation_unit(
            java_source=java_source,
            header_source=read_text(header_path),
            header_name=header_path.name,
            path=source_rel,
        )
        status, diff = write_artifact_if_changed(path=output_path, content=unit.content, dry_run=dry_run, check=check)

        output_rel = to_repo_relative(output_path, repo_root)
        print(f"[{target_name}] generate: {class_name} -> {output_rel} ({status})")
        for warning in unit.warnings:
            print(f"  warning: {warning}")
        if print_diff and diff:
            print(diff)

        declarations = [item for item in unit.segments if isinstance(item, MatchedDeclaration)]
        files.append(
            {
                "source": source_rel,
                "class_name": class_name,
                "header": to_repo_relative(header_path, repo_root),
                "output": output_rel,
                "status": status,
                "declaration_count": len(declarations),
                "raw_block_count": len(unit.segments) - len(declarations),
                "wrapped_methods": [
                    item.signature.name for item in declarations if requires_decomposition(item.declaration)
                ],
                "warnings": list(unit.warnings),
            }
        )

    if not files:
        print(f"[{target_name}] generate: no Java sources with native methods found")

    return {
        "target": target_name,
        "files": files,
        "has_drift": any(item["status"] == "drift" for item in files),
    }
