from __future__ import annotations

import re
from dataclasses import dataclass

from ._core_base import normalize_ws

JNI_EXPORT_MACRO = "JNIEXPORT"
JNI_CALL_MACRO = "JNICALL"

DECLARATION_PATTERN = re.compile(
    rf"{JNI_EXPORT_MACRO}\s+(?P<ret>[^;{{}}()]*?)\s+{JNI_CALL_MACRO}\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"\s*\((?P<params>[^;{}]*?)\)\s*;",
    flags=re.S,
)
JNI_TYPE_PATTERN = re.compile(r"^(?:JNIEnv|JavaVM|j[a-zA-Z]+)\*?$")


@dataclass(frozen=True)
class LowLevelSignature:
    head: str
    name: str
    argument_c_types: tuple[str, ...]
    return_c_type: str
    line: int

    @property
    def declared_argument_count(self) -> int:
        # leading JNIEnv* and jclass/jobject slots are not Java arguments
        return len(self.argument_c_types) - 2


def blank_c_comments(content: str) -> str:
    """Remove comments but keep every newline so match offsets still map to source lines."""

    def _keep_newlines(match: re.Match[str]) -> str:
        return "\n" * match.group(0).count("\n") or " "

    content = re.sub(r"/\*.*?\*/", _keep_newlines, content, flags=re.S)
    content = re.sub(r"//[^\n]*", " ", content)
    return content


def normalize_c_type(value: str) -> str:
    text = normalize_ws(value)
    text = re.sub(r"\s*\*\s*", "*", text)
    text = re.sub(r"\*(?=[A-Za-z_])", "* ", text)
    return text


def split_c_parameters(parameters: str) -> list[str]:
    raw = parameters.strip()
    if not raw or raw == "void":
        return []

    parts: list[str] = []
    token: list[str] = []
    depth = 0

    for ch in raw:
        if ch == "," and depth == 0:
            piece = normalize_ws("".join(token))
            if piece:
                parts.append(piece)
            token = []
            continue

        token.append(ch)
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(0, depth - 1)

    tail = normalize_ws("".join(token))
    if tail:
        parts.append(tail)

    return parts


def parse_c_parameter_type(declaration: str) -> str:
    c_type = normalize_c_type(declaration)
    # hand-written headers may name their parameters; generated ones never do
    named = re.match(r"^(?P<type>\S+\*?)\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)$", c_type)
    if named and JNI_TYPE_PATTERN.match(named.group("type")):
        return named.group("type")
    return c_type


def parse_jni_header(content: str) -> list[LowLevelSignature]:
    text = blank_c_comments(content.replace("\r\n", "\n"))
    signatures: list[LowLevelSignature] = []
    for match in DECLARATION_PATTERN.finditer(text):
        return_type = normalize_c_type(match.group("ret"))
        name = match.group("name")
        signatures.append(
            LowLevelSignature(
                head=f"{JNI_EXPORT_MACRO} {return_type} {JNI_CALL_MACRO} {name}",
                name=name,
                argument_c_types=tuple(parse_c_parameter_type(item) for item in split_c_parameters(match.group("params"))),
                return_c_type=return_type,
                line=text.count("\n", 0, match.start()) + 1,
            )
        )
    return signatures
