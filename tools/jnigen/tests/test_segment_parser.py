from __future__ import annotations

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
import jnigen_core as jnigen  # noqa: E402

SAMPLE_SOURCE = """package com.example;

public class Native {
    /*JNI
    #include <math.h>
    */

    public static native void twice(int[] data, int len); /*
        for(int i = 0; i < len; i++) data[i] *= 2;
    */

    public native int first(String s); /*
        return s[0];
    */
}
"""


class SegmentParserTests(unittest.TestCase):
    def test_parses_raw_blocks_and_declarations_in_order(self) -> None:
        segments = jnigen.parse_java_source(SAMPLE_SOURCE)
        self.assertEqual([type(item).__name__ for item in segments], ["RawBlock", "Declaration", "Declaration"])

        raw = segments[0]
        self.assertEqual(raw.start_line, 4)
        self.assertEqual(raw.native_code, "\n    #include <math.h>\n    ")

        twice = segments[1]
        self.assertEqual(twice.class_name, "Native")
        self.assertEqual(twice.method_name, "twice")
        self.assertTrue(twice.is_static)
        self.assertEqual([arg.name for arg in twice.arguments], ["data", "len"])
        self.assertTrue(twice.arguments[0].type.is_array())
        self.assertTrue(twice.arguments[1].type.is_plain_old_data())
        self.assertEqual(twice.start_line, 8)
        self.assertEqual(twice.end_line, 10)
        self.assertEqual(twice.signature_line, 8)
        self.assertIn("data[i] *= 2;", twice.native_code)

        first = segments[2]
        self.assertFalse(first.is_static)
        self.assertTrue(first.arguments[0].type.is_string())
        self.assertEqual(first.start_line, 12)
        self.assertEqual(first.end_line, 14)

    def test_interleaving_is_preserved(self) -> None:
        source = """class Mixed {
    /*JNI #define A 1 */
    native void a(); /* return; */
    /*JNI #define B 2 */
    /*JNI #define C 3 */
    native void b(); /* */
    /*JNI #undef A */
}
"""
        segments = jnigen.parse_java_source(source)
        kinds = [
            ("raw", item.start_line) if isinstance(item, jnigen.RawBlock) else (item.method_name, item.start_line)
            for item in segments
        ]
        self.assertEqual(kinds, [("raw", 2), ("a", 3), ("raw", 4), ("raw", 5), ("b", 6), ("raw", 7)])

    def test_parameter_spellings(self) -> None:
        source = """class Params {
    public static native void run(@Nullable final float values[], java.nio.ByteBuffer buf,
                                  Map<String, Integer> lookup, long... ids, Object my$handle); /*
    */
}
"""
        (decl,) = jnigen.parse_java_source(source)
        self.assertEqual([arg.name for arg in decl.arguments], ["values", "buf", "lookup", "ids", "my$handle"])
        self.assertEqual(decl.arguments[0].type.c_pointer_type, "float*")
        self.assertTrue(decl.arguments[1].type.is_buffer())
        self.assertTrue(decl.arguments[2].type.is_object())
        self.assertEqual(decl.arguments[3].type.c_pointer_type, "long long*")
        self.assertTrue(decl.arguments[4].type.is_object())
        self.assertEqual(decl.signature_line, 2)
        self.assertEqual(decl.start_line, 3)

    def test_annotations_with_arguments(self) -> None:
        source = """class Annotated {
    @SuppressWarnings("unused") public static native void f(int[] a); /* a[0] = 1; */
    @Deprecated(since = "1", forRemoval = true)
    native void g(String s); /* */
    @Wrapper(inner = @Inner({"x", "y"})) native int h(@Size(max = 4) float[] v, long n); /* return 0; */
}
"""
        segments = jnigen.parse_java_source(source)
        self.assertEqual(
            [(item.method_name, item.is_static, [arg.name for arg in item.arguments]) for item in segments],
            [("f", True, ["a"]), ("g", False, ["s"]), ("h", False, ["v", "n"])],
        )
        self.assertTrue(segments[0].arguments[0].type.is_array())
        self.assertTrue(segments[1].arguments[0].type.is_string())
        self.assertEqual(segments[2].arguments[0].type.c_pointer_type, "float*")
        self.assertEqual(segments[1].signature_line, 3)

    def test_braces_inside_parentheses_do_not_split_statements(self) -> None:
        source = """class Callbacks {
    static { register(() -> { ping(); }, new int[] {1, 2}); }
    @SuppressWarnings({"unused", "rawtypes"}) static native void run(long handle); /* run(handle); */
}
"""
        (decl,) = jnigen.parse_java_source(source)
        self.assertEqual((decl.class_name, decl.method_name, decl.is_static), ("Callbacks", "run", True))
        self.assertEqual(decl.signature_line, 3)

    def test_strip_annotations(self) -> None:
        self.assertEqual(jnigen.normalize_ws(jnigen.strip_annotations('@A @B.C(x = (1 + 2)) int v')), "int v")
        self.assertEqual(jnigen.strip_annotations("int v"), "int v")

    def test_nested_classes_use_binary_names(self) -> None:
        source = """public class Outer {
    void helper() {
        Runnable r = new Runnable() { public void run() {} };
    }
    static class Inner {
        native void poke(int x); /* x++; */
    }
    native void top(); /* */
}
"""
        segments = jnigen.parse_java_source(source)
        self.assertEqual([(item.class_name, item.method_name) for item in segments], [("Outer$Inner", "poke"), ("Outer", "top")])

    def test_literals_and_line_comments_are_not_scanned(self) -> None:
        source = """class Quiet {
    String a = "/* native void fake(); */";
    char b = '\\'';
    // native void alsoFake(); /* nope */
    String c = \"\"\"
        native void block(); /*
        \"\"\";
    native void real(); /* ok */
}
"""
        segments = jnigen.parse_java_source(source)
        self.assertEqual([(item.method_name, item.start_line) for item in segments], [("real", 8)])

    def test_native_method_without_code_is_skipped_with_warning(self) -> None:
        source = """class Bare {
    native void external();
    /** Javadoc for the next method. */
    native void documented(); /* return; */
}
"""
        result = jnigen.parse_java_source_with_diagnostics(source, "Bare.java")
        self.assertEqual([item.method_name for item in result.segments], ["documented"])
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("Bare.java:2", result.warnings[0])
        self.assertIn("Bare#external", result.warnings[0])

    def test_carriage_returns_are_counted_once(self) -> None:
        source = "class Win {\r\n    native void f(); /*\r\n    f();\r\n    */\r\n}\r\n"
        (decl,) = jnigen.parse_java_source(source)
        self.assertEqual((decl.start_line, decl.end_line), (2, 4))


class SegmentParserErrorTests(unittest.TestCase):
    def assertParseError(self, source: str, line: int, fragment: str) -> None:
        with self.assertRaises(jnigen.ParseError) as ctx:
            jnigen.parse_java_source(source, "Broken.java")
        self.assertEqual(ctx.exception.line, line)
        self.assertEqual(ctx.exception.path, "Broken.java")
        self.assertIn(fragment, str(ctx.exception))
        self.assertTrue(str(ctx.exception).startswith(f"Broken.java:{line}: "))

    def test_unterminated_block_comment(self) -> None:
        self.assertParseError("class A {\n    native void f(); /* never closed\n}\n", 2, "unterminated block comment")

    def test_unbalanced_parentheses(self) -> None:
        self.assertParseError("class A {\n    native void f(int a; /* */\n}\n", 2, "unbalanced parentheses")

    def test_parameter_without_type(self) -> None:
        self.assertParseError("class A {\n\n    native void f(a); /* */\n}\n", 3, "parameter 'a'")

    def test_native_method_outside_class(self) -> None:
        self.assertParseError("native void f(); /* */\n", 1, "outside of a class")

    def test_unterminated_literal(self) -> None:
        self.assertParseError('class A {\n    String s = "oops;\n}\n', 2, "unterminated literal")

    def test_unmatched_closing_brace(self) -> None:
        self.assertParseError("class A {\n}\n}\n", 3, "unmatched '}'")


if __name__ == "__main__":
    unittest.main()
