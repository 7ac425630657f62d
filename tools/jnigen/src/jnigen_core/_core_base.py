from __future__ import annotations

import difflib
import fnmatch
import json
import re
import shlex
import subprocess
from pathlib import Path
from typing import Any

import jsonschema

TOOL_VERSION = "1.0.0"
DEFAULT_HEADER_NAME = "{class_name}.h"
DEFAULT_OUTPUT_NAME = "{class_name}.cpp"
NATIVE_MARKER = "native"
VCS_DIRECTORY_NAMES = {".svn", ".git", ".hg"}


class JniGenError(Exception):
    pass


class SourceError(JniGenError):
    def __init__(self, message: str, path: str | None = None, line: int | None = None) -> None:
        self.message = message
        self.path = path
        self.line = line
        super().__init__(self._render())

    def _render(self) -> str:
        location = self.path or "<source>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class ParseError(SourceError):
    pass


class CorrelationError(SourceError):
    pass


def normalize_ws(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def load_json(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise JniGenError(f"Unable to read JSON file '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise JniGenError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise JniGenError(f"JSON root in '{path}' must be an object")
    return payload


def write_json(path: Path, value: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise JniGenError(f"Unable to read file '{path}': {exc}") from exc


def get_schema_path(kind: str) -> Path:
    base = Path(__file__).resolve().parent / "schemas"
    mapping = {
        "config": base / "config.schema.json",
    }
    if kind not in mapping:
        raise JniGenError(f"Unknown schema kind: {kind}")
    return mapping[kind]


def validate_with_jsonschema(kind: str, payload: dict[str, Any]) -> None:
    schema_path = get_schema_path(kind)
    schema_payload = load_json(schema_path)
    try:
        jsonschema.validate(payload, schema_payload)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise JniGenError(f"{kind} failed JSON schema validation at '{location}': {exc.message}") from exc


def normalize_string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise JniGenError(f"'{key}' must be an array of strings")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item:
            raise JniGenError(f"'{key}' must contain only non-empty strings")
        out.append(item)
    return out


def validate_target_payload(target_name: str, target: dict[str, Any]) -> None:
    label = f"target '{target_name}'"
    for key in ("source_dir", "jni_dir"):
        value = target.get(key)
        if not isinstance(value, str) or not value:
            raise JniGenError(f"{label} is missing required string '{key}'")

    normalize_string_list(target.get("includes"), f"{label}.includes")
    normalize_string_list(target.get("excludes"), f"{label}.excludes")

    for key, default in (("header_name", DEFAULT_HEADER_NAME), ("output_name", DEFAULT_OUTPUT_NAME)):
        template = target.get(key, default)
        if not isinstance(template, str) or "{class_name}" not in template:
            raise JniGenError(f"{label}.{key} must be a string containing '{{class_name}}'")

    command = target.get("header_command")
    if command is not None:
        tokens = normalize_string_list(command, f"{label}.header_command")
        if not tokens:
            raise JniGenError(f"{label}.header_command must not be empty")
        uses_class_dir = any("{class_dir}" in token for token in tokens)
        if uses_class_dir and not isinstance(target.get("class_dir"), str):
            raise JniGenError(f"{label}.header_command uses '{{class_dir}}' but 'class_dir' is not configured")


def validate_config_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise JniGenError("config root must be an object")
    validate_with_jsonschema("config", payload)
    targets = payload.get("targets")
    if not isinstance(targets, dict) or not targets:
        raise JniGenError("config must define non-empty 'targets' object")
    for name, target in targets.items():
        if not isinstance(target, dict):
            raise JniGenError(f"target '{name}' must be an object")
        validate_target_payload(name, target)


def load_config(path: Path) -> dict[str, Any]:
    config = load_json(path)
    validate_config_payload(config)
    return config


def resolve_target(config: dict[str, Any], target_name: str) -> dict[str, Any]:
    targets = config.get("targets")
    if not isinstance(targets, dict):
        raise JniGenError("Config is missing required object: 'targets'.")
    target = targets.get(target_name)
    if not isinstance(target, dict):
        known = ", ".join(sorted(targets.keys()))
        raise JniGenError(f"Unknown target '{target_name}'. Known targets: {known or '<none>'}")
    return target


def resolve_target_names(config: dict[str, Any], target_name: str | None) -> list[str]:
    targets = config.get("targets")
    if not isinstance(targets, dict) or not targets:
        raise JniGenError("config must define non-empty 'targets' object")
    if target_name:
        resolve_target(config, target_name)
        return [target_name]
    return sorted(targets.keys())


def ensure_relative_path(root: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return root / path


def to_repo_relative(path: Path, repo_root: Path) -> str:
    try:
        return str(path.resolve().relative_to(repo_root.resolve()))
    except ValueError:
        return str(path.resolve())


def matches_any(relative_path: str, patterns: list[str]) -> bool:
    for pattern in patterns:
        if fnmatch.fnmatch(relative_path, pattern):
            return True
        # "**/" also matches files at the root of the tree
        if pattern.startswith("**/") and fnmatch.fnmatch(relative_path, pattern[3:]):
            return True
    return False


def render_command(template: list[str], replacements: dict[str, str]) -> list[str]:
    rendered: list[str] = []
    for token in template:
        current = token
        for key, value in replacements.items():
            current = current.replace(f"{{{key}}}", value)
        if current:
            rendered.append(current)
    return rendered


def run_command(command: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    try:
        proc = subprocess.run(command, cwd=str(cwd), capture_output=True, text=True)
    except OSError as exc:
        raise JniGenError(f"Unable to run '{shlex.join(command)}': {exc}") from exc
    if proc.returncode != 0:
        details = proc.stderr.strip() or proc.stdout.strip() or "<no output>"
        raise JniGenError(f"Command '{shlex.join(command)}' failed with exit code {proc.returncode}: {details}")
    return proc


def normalized_lines(value: str) -> list[str]:
    return value.replace("\r\n", "\n").splitlines()


def compute_unified_diff(old_content: str, new_content: str, old_label: str, new_label: str) -> str:
    diff_lines = difflib.unified_diff(
        normalized_lines(old_content),
        normalized_lines(new_content),
        fromfile=old_label,
        tofile=new_label,
        lineterm="",
    )
    return "\n".join(diff_lines)


def write_artifact_if_changed(
    *,
    path: Path,
    content: str,
    dry_run: bool,
    check: bool,
) -> tuple[str, str]:
    old_content = read_text(path) if path.exists() else ""
    if old_content == content:
        return "unchanged", ""
    diff = compute_unified_diff(old_content, content, f"a/{path}", f"b/{path}")
    if check:
        return "drift", diff
    if dry_run:
        return "would_write", diff
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return "updated", diff
