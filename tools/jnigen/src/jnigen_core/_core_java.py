from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ._core_base import NATIVE_MARKER, ParseError, normalize_ws
from ._core_types import ArgumentType, classify_java_type

RAW_BLOCK_TAG = "JNI"

CLASS_HEADER_PATTERN = re.compile(r"(?:^|[^\w$.@])(?:class|interface|enum|record)\s+(?P<name>[A-Za-z_$][\w$]*)")
NATIVE_MODIFIER_PATTERN = re.compile(rf"(?<![\w$]){NATIVE_MARKER}(?![\w$])")
ANNOTATION_NAME_PATTERN = re.compile(r"@\s*[A-Za-z_$][\w$.]*")
FINAL_MODIFIER_PATTERN = re.compile(r"(?<![\w$])final\s+")
PARAMETER_PATTERN = re.compile(r"^(?P<type>.*?[\w$>\]])\s+(?P<name>[^\s\[\]]+)(?P<dims>(?:\s*\[\s*\])*)$")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*$")


@dataclass(frozen=True)
class Argument:
    name: str
    type: ArgumentType


@dataclass(frozen=True)
class RawBlock:
    native_code: str
    start_line: int


@dataclass(frozen=True)
class Declaration:
    class_name: str
    method_name: str
    is_static: bool
    arguments: tuple[Argument, ...]
    native_code: str
    start_line: int
    end_line: int
    signature_line: int

    def has_disposable_argument(self) -> bool:
        return any(arg.type.is_disposable() for arg in self.arguments)

    @property
    def qualified_name(self) -> str:
        return f"{self.class_name}#{self.method_name}"


Segment = Union[RawBlock, Declaration]


@dataclass(frozen=True)
class ParseResult:
    segments: tuple[Segment, ...]
    warnings: tuple[str, ...]

    @property
    def declarations(self) -> list[Declaration]:
        return [segment for segment in self.segments if isinstance(segment, Declaration)]


@dataclass(frozen=True)
class _NativeSignature:
    class_name: str
    method_name: str
    is_static: bool
    arguments: tuple[Argument, ...]
    line: int


def split_java_parameters(parameters: str) -> list[str]:
    raw = parameters.strip()
    if not raw:
        return []

    parts: list[str] = []
    token: list[str] = []
    depth = 0

    for ch in raw:
        if ch == "," and depth == 0:
            parts.append("".join(token))
            token = []
            continue

        token.append(ch)
        if ch in "<(":
            depth += 1
        elif ch in ">)":
            depth = max(0, depth - 1)

    parts.append("".join(token))
    return parts


def strip_annotations(text: str) -> str:
    """Replace each annotation, including a balanced argument list, with a space."""
    out: list[str] = []
    idx = 0
    while idx < len(text):
        match = ANNOTATION_NAME_PATTERN.match(text, idx) if text[idx] == "@" else None
        if match is None:
            out.append(text[idx])
            idx += 1
            continue

        idx = match.end()
        look = idx
        while look < len(text) and text[look].isspace():
            look += 1
        if look < len(text) and text[look] == "(":
            close_idx = _find_closing_paren(text, look)
            if close_idx is None:
                # left in place so the caller reports the unbalanced parentheses
                out.append(text[match.start():])
                break
            idx = close_idx + 1
        out.append(" ")
    return "".join(out)


def parse_java_parameter(declaration: str, path: str | None, line: int) -> Argument:
    text = strip_annotations(declaration)
    text = FINAL_MODIFIER_PATTERN.sub(" ", text)
    text = normalize_ws(text)
    if not text:
        raise ParseError("empty parameter in native method signature", path, line)

    if "..." in text:
        java_type, _, name = text.partition("...")
        java_type = java_type.strip()
        name = name.strip()
        if not java_type or not name or " " in name:
            raise ParseError(f"malformed varargs parameter '{text}'", path, line)
        return Argument(name=name, type=classify_java_type(f"{java_type}[]"))

    match = PARAMETER_PATTERN.match(text)
    if not match:
        raise ParseError(f"parameter '{text}' must declare both a type and a name", path, line)
    dims = match.group("dims").count("[")
    java_type = match.group("type") + "[]" * dims
    return Argument(name=match.group("name"), type=classify_java_type(java_type))


def _find_closing_paren(text: str, open_idx: int) -> int | None:
    depth = 0
    for idx in range(open_idx, len(text)):
        ch = text[idx]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx
    return None


class _JavaScanner:
    """Single pass over a Java file that collects raw blocks and native declarations in order."""

    def __init__(self, text: str, path: str | None) -> None:
        self.text = text
        self.path = path
        self.pos = 0
        self.line = 1
        self.segments: list[Segment] = []
        self.warnings: list[str] = []
        self.scopes: list[str | None] = []
        self.statement: list[str] = []
        self.statement_line = 1
        self.statement_has_text = False
        self.paren_depth = 0
        # statements interrupted by a brace inside parentheses, one slot per scope
        self.suspended: list[tuple[list[str], int, bool, int] | None] = []
        self.pending: _NativeSignature | None = None

    def error(self, message: str, line: int | None = None) -> ParseError:
        return ParseError(message, self.path, self.line if line is None else line)

    def run(self) -> ParseResult:
        text = self.text
        size = len(text)
        while self.pos < size:
            ch = text[self.pos]
            nxt = text[self.pos + 1] if self.pos + 1 < size else ""

            if ch.isspace():
                self._append(ch)
                self.pos += 1
                continue

            if ch == "/" and nxt == "*":
                self._block_comment()
                continue

            self._drop_pending()

            if ch == "/" and nxt == "/":
                end = text.find("\n", self.pos)
                self.pos = size if end < 0 else end
                self._append(" ")
            elif ch == '"' or ch == "'":
                self._literal(ch)
            elif ch == ";":
                self._end_statement()
                self.pos += 1
            elif ch == "{":
                self._open_scope()
                self.pos += 1
            elif ch == "}":
                self._close_scope()
                self.pos += 1
            else:
                if ch == "(":
                    self.paren_depth += 1
                elif ch == ")":
                    self.paren_depth = max(0, self.paren_depth - 1)
                self._append(ch)
                self.pos += 1

        self._drop_pending()
        return ParseResult(segments=tuple(self.segments), warnings=tuple(self.warnings))

    def _append(self, ch: str) -> None:
        if ch == "\n":
            self.line += 1
        elif not ch.isspace() and not self.statement_has_text:
            self.statement_has_text = True
            self.statement_line = self.line
        self.statement.append(ch)

    def _append_token(self, token: str) -> None:
        if not self.statement_has_text:
            self.statement_has_text = True
            self.statement_line = self.line
        self.statement.append(token)

    def _take_statement(self) -> str:
        stmt = "".join(self.statement)
        self.statement = []
        self.statement_has_text = False
        self.paren_depth = 0
        return stmt

    def _drop_pending(self) -> None:
        if self.pending is None:
            return
        pending = self.pending
        self.pending = None
        self.warnings.append(
            f"{self.path or '<source>'}:{pending.line}: native method "
            f"'{pending.class_name}#{pending.method_name}' has no embedded code block; skipped"
        )

    def _block_comment(self) -> None:
        start_line = self.line
        end = self.text.find("*/", self.pos + 2)
        if end < 0:
            raise self.error("unterminated block comment", start_line)
        body = self.text[self.pos + 2:end]
        self.pos = end + 2
        self.line += body.count("\n")

        if body.startswith(RAW_BLOCK_TAG):
            self._drop_pending()
            self.segments.append(RawBlock(native_code=body[len(RAW_BLOCK_TAG):], start_line=start_line))
        elif self.pending is not None and not body.startswith("*"):
            pending = self.pending
            self.pending = None
            self.segments.append(
                Declaration(
                    class_name=pending.class_name,
                    method_name=pending.method_name,
                    is_static=pending.is_static,
                    arguments=pending.arguments,
                    native_code=body,
                    start_line=start_line,
                    end_line=self.line,
                    signature_line=pending.line,
                )
            )
        else:
            self._drop_pending()

        self.statement.append(" ")

    def _literal(self, quote: str) -> None:
        text = self.text
        start_line = self.line
        if quote == '"' and text.startswith('"""', self.pos):
            end = text.find('"""', self.pos + 3)
            while end >= 0 and text[end - 1] == "\\":
                end = text.find('"""', end + 1)
            if end < 0:
                raise self.error("unterminated text block", start_line)
            self.line += text.count("\n", self.pos, end)
            self.pos = end + 3
            self._append_token('""')
            return

        idx = self.pos + 1
        while idx < len(text):
            ch = text[idx]
            if ch == "\\":
                idx += 2
                continue
            if ch == "\n":
                break
            if ch == quote:
                self.pos = idx + 1
                self._append_token(quote * 2)
                return
            idx += 1
        raise self.error("unterminated literal", start_line)

    def _end_statement(self) -> None:
        line = self.statement_line
        stmt = self._take_statement()
        if NATIVE_MODIFIER_PATTERN.search(stmt) and "(" in stmt:
            self.pending = self._parse_signature(stmt, line)

    def _open_scope(self) -> None:
        if self.paren_depth > 0:
            # array initializer in an annotation, or a lambda body passed as an argument
            self.suspended.append((self.statement, self.statement_line, self.statement_has_text, self.paren_depth))
            self._take_statement()
            self.scopes.append(None)
            return
        stmt = self._take_statement()
        match = CLASS_HEADER_PATTERN.search(stmt)
        self.suspended.append(None)
        self.scopes.append(match.group("name") if match else None)

    def _close_scope(self) -> None:
        self._take_statement()
        if not self.scopes:
            raise self.error("unmatched '}'")
        self.scopes.pop()
        resumed = self.suspended.pop()
        if resumed is not None:
            self.statement, self.statement_line, self.statement_has_text, self.paren_depth = resumed
            self.statement.append("{}")

    def _current_class(self) -> str | None:
        names = [name for name in self.scopes if name]
        if not names:
            return None
        return "$".join(names)

    def _parse_signature(self, stmt: str, line: int) -> _NativeSignature:
        stmt = strip_annotations(stmt)
        open_idx = stmt.find("(")
        if open_idx < 0:
            raise self.error(f"native declaration has no parameter list: '{normalize_ws(stmt)}'", line)
        close_idx = _find_closing_paren(stmt, open_idx)
        if close_idx is None:
            raise self.error("unbalanced parentheses in native method signature", line)
        trailer = normalize_ws(stmt[close_idx + 1:])
        if trailer and not trailer.startswith("throws "):
            raise self.error(f"unexpected text after native method parameters: '{trailer}'", line)

        head = normalize_ws(stmt[:open_idx])
        tokens = head.split(" ")
        method_name = tokens[-1] if tokens else ""
        if not IDENTIFIER_PATTERN.match(method_name) or method_name == NATIVE_MARKER:
            raise self.error(f"native method signature has no method name: '{normalize_ws(stmt)}'", line)
        if NATIVE_MARKER not in tokens[:-1]:
            raise self.error(f"'{NATIVE_MARKER}' must be a modifier of the method: '{normalize_ws(stmt)}'", line)

        class_name = self._current_class()
        if class_name is None:
            raise self.error(f"native method '{method_name}' is declared outside of a class", line)

        arguments = tuple(
            parse_java_parameter(chunk, self.path, line)
            for chunk in split_java_parameters(stmt[open_idx + 1:close_idx])
        )
        return _NativeSignature(
            class_name=class_name,
            method_name=method_name,
            is_static="static" in tokens[:-1],
            arguments=arguments,
            line=line,
        )


def parse_java_source_with_diagnostics(text: str, path: str | None = None) -> ParseResult:
    return _JavaScanner(text, path).run()


def parse_java_source(text: str, path: str | None = None) -> list[Segment]:
    return list(parse_java_source_with_diagnostics(text, path).segments)
