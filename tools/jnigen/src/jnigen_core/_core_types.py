from __future__ import annotations

import re
from dataclasses import dataclass

from ._core_base import normalize_ws

CATEGORY_POD = "pod"
CATEGORY_OBJECT = "object"
CATEGORY_STRING = "string"
CATEGORY_ARRAY = "array"
CATEGORY_BUFFER = "buffer"

PRIMITIVE_TYPES = frozenset({"boolean", "byte", "char", "short", "int", "long", "float", "double"})

STRING_TYPES = frozenset({"String", "java.lang.String"})

ARRAY_C_TYPES = {
    "boolean": "bool*",
    "byte": "char*",
    "char": "unsigned short*",
    "short": "short*",
    "int": "int*",
    "long": "long long*",
    "float": "float*",
    "double": "double*",
}

BUFFER_C_TYPES = {
    "Buffer": "unsigned char*",
    "ByteBuffer": "char*",
    "CharBuffer": "unsigned short*",
    "ShortBuffer": "short*",
    "IntBuffer": "int*",
    "LongBuffer": "long long*",
    "FloatBuffer": "float*",
    "DoubleBuffer": "double*",
}

STRING_C_TYPE = "char*"


@dataclass(frozen=True)
class ArgumentType:
    category: str
    java_type: str
    c_pointer_type: str | None = None

    def is_plain_old_data(self) -> bool:
        return self.category == CATEGORY_POD

    def is_object(self) -> bool:
        return self.category == CATEGORY_OBJECT

    def is_string(self) -> bool:
        return self.category == CATEGORY_STRING

    def is_array(self) -> bool:
        return self.category == CATEGORY_ARRAY

    def is_buffer(self) -> bool:
        return self.category == CATEGORY_BUFFER

    def is_disposable(self) -> bool:
        """True for arguments that need a native pointer set up before the body runs."""
        return not (self.is_plain_old_data() or self.is_object())

    def requires_release(self) -> bool:
        # buffer addresses are computed, not acquired
        return self.is_string() or self.is_array()


def normalize_java_type(declared: str) -> str:
    text = normalize_ws(declared)
    text = re.sub(r"\s*\[\s*\]", "[]", text)
    if text.endswith("..."):
        text = text[:-3].rstrip() + "[]"
    return text


def _simple_name(qualified: str, package: str) -> str | None:
    if qualified.startswith(package + "."):
        return qualified[len(package) + 1:]
    if "." in qualified:
        return None
    return qualified


def classify_java_type(declared: str) -> ArgumentType:
    java_type = normalize_java_type(declared)

    if java_type in PRIMITIVE_TYPES:
        return ArgumentType(CATEGORY_POD, java_type)

    if java_type in STRING_TYPES:
        return ArgumentType(CATEGORY_STRING, java_type, STRING_C_TYPE)

    if java_type.endswith("[]"):
        element = java_type[:-2]
        c_type = ARRAY_C_TYPES.get(element)
        if c_type is not None:
            return ArgumentType(CATEGORY_ARRAY, java_type, c_type)
        return ArgumentType(CATEGORY_OBJECT, java_type)

    buffer_name = _simple_name(java_type, "java.nio")
    if buffer_name is not None and buffer_name in BUFFER_C_TYPES:
        return ArgumentType(CATEGORY_BUFFER, java_type, BUFFER_C_TYPES[buffer_name])

    return ArgumentType(CATEGORY_OBJECT, java_type)
