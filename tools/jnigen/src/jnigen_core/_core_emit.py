from __future__ import annotations

from typing import Sequence

from ._core_correlate import MatchedDeclaration, MatchedSegment
from ._core_java import Argument, Declaration, RawBlock

JNI_ARG_PREFIX = "obj_"
JNI_RETURN_VALUE = "JNI_returnValue"
JNI_WRAPPER_PREFIX = "wrapped_"
LINE_MARKER_PREFIX = "//@line:"
RETURN_KEYWORD = "return"


def line_marker(line: int) -> str:
    return f"{LINE_MARKER_PREFIX}{line}"


def requires_decomposition(declaration: Declaration) -> bool:
    """Conservative check: any textual 'return' next to an acquired pointer forces a wrapper."""
    return declaration.has_disposable_argument() and RETURN_KEYWORD in declaration.native_code


def ordered_acquisitions(declaration: Declaration) -> list[Argument]:
    # GetPrimitiveArrayCritical forbids further JNI calls until released, so arrays go last
    buffers = [arg for arg in declaration.arguments if arg.type.is_buffer()]
    strings = [arg for arg in declaration.arguments if arg.type.is_string()]
    arrays = [arg for arg in declaration.arguments if arg.type.is_array()]
    return buffers + strings + arrays


def ordered_releases(declaration: Declaration) -> list[Argument]:
    arrays = [arg for arg in declaration.arguments if arg.type.is_array()]
    strings = [arg for arg in declaration.arguments if arg.type.is_string()]
    return arrays + strings


def handle_name(arg: Argument) -> str:
    if arg.type.is_disposable():
        return f"{JNI_ARG_PREFIX}{arg.name}"
    return arg.name


def render_acquisition(arg: Argument) -> str:
    c_type = arg.type.c_pointer_type
    handle = handle_name(arg)
    if arg.type.is_buffer():
        return f"\t{c_type} {arg.name} = ({c_type})env->GetDirectBufferAddress({handle});"
    if arg.type.is_string():
        return f"\t{c_type} {arg.name} = ({c_type})env->GetStringUTFChars({handle}, 0);"
    if arg.type.is_array():
        return f"\t{c_type} {arg.name} = ({c_type})env->GetPrimitiveArrayCritical({handle}, 0);"
    raise ValueError(f"argument '{arg.name}' of type '{arg.type.java_type}' needs no setup")


def render_release(arg: Argument) -> str:
    handle = handle_name(arg)
    if arg.type.is_array():
        return f"\tenv->ReleasePrimitiveArrayCritical({handle}, {arg.name}, 0);"
    if arg.type.is_string():
        return f"\tenv->ReleaseStringUTFChars({handle}, {arg.name});"
    raise ValueError(f"argument '{arg.name}' of type '{arg.type.java_type}' needs no cleanup")


def render_prologue(declaration: Declaration) -> list[str]:
    return [render_acquisition(arg) for arg in ordered_acquisitions(declaration)]


def render_epilogue(declaration: Declaration) -> list[str]:
    return [render_release(arg) for arg in ordered_releases(declaration)]


def _receiver_name(declaration: Declaration) -> str:
    return "clazz" if declaration.is_static else "object"


def render_parameters(matched: MatchedDeclaration, with_acquired_pointers: bool = False) -> str:
    declaration = matched.declaration
    receiver_type = "jclass" if declaration.is_static else "jobject"
    params = ["JNIEnv* env", f"{receiver_type} {_receiver_name(declaration)}"]
    for index, arg in enumerate(declaration.arguments):
        c_type = matched.signature.argument_c_types[index + 2]
        params.append(f"{c_type} {handle_name(arg)}")
    if with_acquired_pointers:
        for arg in ordered_acquisitions(declaration):
            params.append(f"{arg.type.c_pointer_type} {arg.name}")
    return ", ".join(params)


def render_call_arguments(declaration: Declaration) -> str:
    values = ["env", _receiver_name(declaration)]
    values.extend(handle_name(arg) for arg in declaration.arguments)
    values.extend(arg.name for arg in ordered_acquisitions(declaration))
    return ", ".join(values)


def wrapped_method_name(matched: MatchedDeclaration) -> str:
    return f"{JNI_WRAPPER_PREFIX}{matched.signature.name}"


def render_body(declaration: Declaration) -> list[str]:
    return [line_marker(declaration.start_line), declaration.native_code]


def _block(lines: list[str]) -> list[str]:
    return lines + [""] if lines else []


def render_method(matched: MatchedDeclaration) -> list[str]:
    declaration = matched.declaration
    signature = matched.signature
    prologue = render_prologue(declaration)
    epilogue = render_epilogue(declaration)
    outer_head = f"{signature.head}({render_parameters(matched)}) {{"

    lines: list[str] = [line_marker(declaration.start_line)]

    if not requires_decomposition(declaration):
        lines.append(outer_head)
        lines.extend(_block(prologue))
        lines.extend(render_body(declaration))
        lines.extend(_block(epilogue))
        lines.append("}")
        lines.append("")
        return lines

    inner_name = wrapped_method_name(matched)
    lines.append(
        f"static inline {signature.return_c_type} {inner_name}"
        f"({render_parameters(matched, with_acquired_pointers=True)}) {{"
    )
    lines.extend(render_body(declaration))
    lines.append("}")
    lines.append("")

    call = f"{inner_name}({render_call_arguments(declaration)});"
    returns_value = signature.return_c_type != "void"
    lines.append(outer_head)
    lines.extend(_block(prologue))
    if returns_value:
        lines.append(f"\t{signature.return_c_type} {JNI_RETURN_VALUE} = {call}")
    else:
        lines.append(f"\t{call}")
    lines.append("")
    lines.extend(_block(epilogue))
    if returns_value:
        lines.append(f"\treturn {JNI_RETURN_VALUE};")
    lines.append("}")
    lines.append("")
    return lines


def emit_method(matched: MatchedDeclaration) -> str:
    return "\n".join(render_method(matched)) + "\n"


def emit_raw_block(block: RawBlock) -> str:
    native_code = block.native_code.replace("\r", "")
    return f"{line_marker(block.start_line)}\n{native_code}\n"


def emit_compilation_unit(segments: Sequence[MatchedSegment], header_name: str) -> str:
    parts: list[str] = [f"#include <{header_name}>\n"]
    for segment in segments:
        parts.append("\n")
        if isinstance(segment, RawBlock):
            parts.append(emit_raw_block(segment))
        elif isinstance(segment, MatchedDeclaration):
            parts.append(emit_method(segment))
        else:
            raise TypeError(f"unexpected segment type: {type(segment).__name__}")
    return "".join(parts)
