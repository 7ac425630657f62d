from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from ._core_base import CorrelationError
from ._core_header import LowLevelSignature
from ._core_java import Declaration, RawBlock, Segment


@dataclass(frozen=True)
class MatchedDeclaration:
    declaration: Declaration
    signature: LowLevelSignature


MatchedSegment = Union[RawBlock, MatchedDeclaration]


def jni_mangle(name: str) -> str:
    """JNI short-name escaping; plain ASCII identifiers without '_' or '$' are unchanged."""
    out: list[str] = []
    for ch in name:
        if ch == "_":
            out.append("_1")
        elif ch == "$":
            out.append("_00024")
        elif ch == ".":
            out.append("_")
        elif ch.isascii() and ch.isalnum():
            out.append(ch)
        else:
            out.append(f"_0{ord(ch):04x}")
    return "".join(out)


def declaration_token(declaration: Declaration) -> str:
    return f"{jni_mangle(declaration.class_name)}_{jni_mangle(declaration.method_name)}"


def find_signature(declaration: Declaration, signatures: Sequence[LowLevelSignature]) -> LowLevelSignature | None:
    token = declaration_token(declaration)
    for signature in signatures:
        if token not in signature.head:
            continue
        # overloads are told apart by argument count only
        if signature.declared_argument_count == len(declaration.arguments):
            return signature
    return None


def correlate(
    segments: Sequence[Segment],
    signatures: Sequence[LowLevelSignature],
    path: str | None = None,
) -> list[MatchedSegment]:
    matched: list[MatchedSegment] = []
    for segment in segments:
        if isinstance(segment, RawBlock):
            matched.append(segment)
            continue
        signature = find_signature(segment, signatures)
        if signature is None:
            raise CorrelationError(
                f"Couldn't find C method for Java method '{segment.qualified_name}' "
                f"(looked for '{declaration_token(segment)}' with {len(segment.arguments)} argument(s) "
                f"among {len(signatures)} header declaration(s))",
                path,
                segment.signature_line,
            )
        matched.append(MatchedDeclaration(declaration=segment, signature=signature))
    return matched
