import unittest

from scopecss.hasher import fingerprint
from scopecss.tokens import EOF_TOKEN, Token, TokenKind, TokenStream
from scopecss.transformer import ScopeTransformer, process


def scoped(name: str, css: str) -> str:
    return f"{name}_{fingerprint(css)}"


class ListTokenStream(TokenStream):
    """Replays a fixed list of tokens."""

    def __init__(self, tokens):
        self._tokens = list(tokens)

    def next_token(self) -> Token:
        if not self._tokens:
            return EOF_TOKEN
        return self._tokens.pop(0)


class TestScopeTransformer(unittest.TestCase):
    def test_scopes_class_selector(self) -> None:
        css = ".test-class {\ncolor: red;\nfont-size: large;\n}"
        result = process(css)
        self.assertEqual(list(result.classes), ["test-class"])
        self.assertEqual(result.classes["test-class"], scoped("test-class", css))
        self.assertEqual(result.css, css.replace("test-class", scoped("test-class", css)))
        self.assertEqual(result.fingerprint, fingerprint(css))

    def test_global_block_is_unwrapped_and_unscoped(self) -> None:
        result = process(":global {.test-class { color: red; font-size: large; }}")
        self.assertEqual(result.css, " .test-class { color: red; font-size: large; }")
        self.assertEqual(result.classes, {})

    def test_unterminated_global_block(self) -> None:
        with self.assertLogs("scopecss.transformer", level="DEBUG") as logs:
            result = process(":global {.test-class { color: red; }")
        self.assertEqual(result.css, " .test-class { color: red; }")
        self.assertEqual(result.classes, {})
        self.assertIn(":global block not closed", logs.output[0])

    def test_crlf_global_block_is_byte_identical(self) -> None:
        result = process(":global {\r\n.a { color: red; }\r\n}\r\n#x\x00 {}")
        self.assertEqual(result.css, " \r\n.a { color: red; }\r\n\r\n#x\x00 {}")
        self.assertEqual(result.classes, {})

    def test_crlf_scoped_rules_keep_line_endings(self) -> None:
        css = ".a {\r\n\tcolor: red;\r\n}\r\n"
        result = process(css)
        self.assertEqual(result.css, css.replace("a {", scoped("a", css) + " {"))

    def test_global_block_then_scoped_rules(self) -> None:
        css = ":global { .a { } } .b { }"
        result = process(css)
        self.assertEqual(result.css, f"  .a {{ }}  .{scoped('b', css)} {{ }}")
        self.assertEqual(list(result.classes), ["b"])

    def test_media_block(self) -> None:
        css = (
            "@media screen and (min-width: 70ch) and (max-width: 100ch) {\n"
            "\t.test-class {\n\t\tcolor: green;\n\t\tfont-size: large;\n\t}\n}"
        )
        result = process(css)
        self.assertEqual(list(result.classes), ["test-class"])
        self.assertEqual(result.css, css.replace("test-class", scoped("test-class", css)))
        self.assertTrue(result.css.startswith("@media screen and (min-width: 70ch) and (max-width: 100ch) {"))

    def test_media_block_ends_at_matching_brace(self) -> None:
        css = "@media print { .a { } .b { } } .c:hover { }"
        result = process(css)
        self.assertEqual(set(result.classes), {"a", "b", "c"})
        self.assertIn(".c_", result.css)

    def test_empty(self) -> None:
        result = process("")
        self.assertEqual(result.css, "")
        self.assertEqual(result.classes, {})

    def test_comments_pass_through(self) -> None:
        css = "/* Test Comments */ /* Not Closing Comment"
        result = process(css)
        self.assertEqual(result.css, css)
        self.assertEqual(result.classes, {})

    def test_class_names_inside_comments_are_ignored(self) -> None:
        css = "/* .hidden */ .shown {}"
        result = process(css)
        self.assertEqual(list(result.classes), ["shown"])
        self.assertTrue(result.css.startswith("/* .hidden */ ."))

    def test_id_selector_is_not_scoped(self) -> None:
        css = "#test-class {color: red; font-size: medium}"
        result = process(css)
        self.assertEqual(result.css, css)
        self.assertEqual(result.classes, {})

    def test_other_at_rules_pass_through(self) -> None:
        css = (
            '@import url("path/to/styles.css");\n'
            "@keyframes myAnimation {\n\tfrom {\n\t\tbackground-color: red;\n\t}\n"
            "\tto {\n\t\tbackground-color: blue;\n\t}\n}\n"
            "@keyframes anotherAnimation {\n\t0% {\n\t\tbackground-color: green;\n\t}\n"
            "\t100% {\n\t\tbackground-color: purple;\n\t}\n}"
        )
        result = process(css)
        self.assertEqual(result.css, css)
        self.assertEqual(result.classes, {})

    def test_supports_rule_is_not_a_media_block(self) -> None:
        # classes inside other at-rules are still scoped by the normal pass
        css = "@supports (display: grid) { .grid { display: grid; } }"
        result = process(css)
        self.assertEqual(result.css, css.replace("grid {", scoped("grid", css) + " {"))
        self.assertEqual(list(result.classes), ["grid"])

    def test_pseudo_classes_and_combinators(self) -> None:
        css = ".a:hover > .b::before, .c:not(.d) {}"
        result = process(css)
        self.assertEqual(set(result.classes), {"a", "b", "c", "d"})
        expected = (
            f".{scoped('a', css)}:hover > .{scoped('b', css)}::before, "
            f".{scoped('c', css)}:not(.{scoped('d', css)}) {{}}"
        )
        self.assertEqual(result.css, expected)

    def test_repeated_class_has_one_entry(self) -> None:
        css = ".a {} .a:hover {} .a .a {}"
        result = process(css)
        self.assertEqual(result.classes, {"a": scoped("a", css)})
        self.assertEqual(result.css.count(scoped("a", css)), 4)

    def test_dot_not_followed_by_ident(self) -> None:
        css = ". a { margin: .5em 1.5em }"
        result = process(css)
        self.assertEqual(result.css, css)
        self.assertEqual(result.classes, {})

    def test_escaped_class_name(self) -> None:
        css = ".md\\:flex { display: flex }"
        result = process(css)
        fp = fingerprint(css)
        self.assertEqual(result.classes, {"md:flex": f"md:flex_{fp}"})
        self.assertEqual(result.css, f".md\\:flex_{fp} {{ display: flex }}")

    def test_other_identifiers_untouched(self) -> None:
        css = ":root { --main: red; } div.card span { color: var(--main); }"
        result = process(css)
        self.assertEqual(list(result.classes), ["card"])
        self.assertEqual(
            result.css,
            f":root {{ --main: red; }} div.{scoped('card', css)} span {{ color: var(--main); }}",
        )

    def test_trailing_colon_is_kept(self) -> None:
        self.assertEqual(process("a:").css, "a:")

    def test_unterminated_string(self) -> None:
        css = '.a { content: "abc'
        result = process(css)
        self.assertEqual(result.css, css.replace("a {", scoped("a", css) + " {"))

    def test_deterministic(self) -> None:
        css = "@media print { .x {} } .y:global {} :global { .z {} }"
        first = process(css)
        second = process(css)
        self.assertEqual(first.css, second.css)
        self.assertEqual(first.classes, second.classes)

    def test_different_rulesets_get_different_names(self) -> None:
        one = process(".a { color: red; }")
        two = process(".a { color: blue; }")
        self.assertNotEqual(one.classes["a"], two.classes["a"])

    def test_bytes_input(self) -> None:
        css = ".a {}"
        result = process(css.encode("utf-8"))
        self.assertEqual(result.classes, {"a": scoped("a", css)})

    def test_custom_separator(self) -> None:
        css = ".a {}"
        transformer = ScopeTransformer(separator="--")
        result = transformer.process(css)
        self.assertEqual(result.classes["a"], f"a--{fingerprint(css)}")
        self.assertEqual(transformer.scoped_name("a", css), result.classes["a"])

    def test_error_token_stops_processing(self) -> None:
        tokens = [
            Token(TokenKind.DELIM, ".", "."),
            Token(TokenKind.IDENT, "a", "a"),
            Token(TokenKind.ERROR, "@@", "bad", line=1, column=3),
            Token(TokenKind.DELIM, ".", "."),
            Token(TokenKind.IDENT, "b", "b"),
        ]
        transformer = ScopeTransformer(stream_factory=lambda styles: ListTokenStream(tokens))
        with self.assertLogs("scopecss.transformer", level="DEBUG") as logs:
            result = transformer.process("whatever")
        self.assertEqual(result.css, "." + scoped("a", "whatever"))
        self.assertEqual(list(result.classes), ["a"])
        self.assertIn("lexical error", logs.output[0])

    def test_transformer_is_reusable(self) -> None:
        transformer = ScopeTransformer()
        first = transformer.process(":global { .a {} ")
        second = transformer.process(".b {}")
        self.assertEqual(first.classes, {})
        self.assertEqual(list(second.classes), ["b"])


if __name__ == "__main__":
    unittest.main()
