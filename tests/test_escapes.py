"""Tests for escaped-newline normalization."""

from docforge.escapes import normalize_escapes


class TestNormalizeEscapes:
    """Tests for normalize_escapes function."""

    def test_block_and_statement_boundaries(self):
        """Escapes after braces and semicolons become line breaks."""
        code = "function a() {\\n  return 1;\\n}"
        assert normalize_escapes(code) == "function a() {\n  return 1;\n}"

    def test_closers_and_separators(self):
        """Escapes around parens, brackets, commas and keywords become line breaks."""
        code = "f(x)\\nconst a = [\\n1,\\n2];\\nif (a) {}\\nend"
        assert normalize_escapes(code) == "f(x)\nconst a = [\n1,\n2];\nif (a) {}\nend"

    def test_comments(self):
        """An escape before a line comment becomes a line break."""
        code = "a();\\n// note\\nb();"
        assert normalize_escapes(code) == "a();\n // note\nb();"

    def test_escape_mid_expression_kept(self):
        """An escape inside an expression is left alone."""
        code = "const s = 'a' + '\\n' + b"
        assert normalize_escapes(code) == code

    def test_real_newlines_unchanged(self):
        """Code with real line breaks is unchanged."""
        code = "function a() {\n  return 1;\n}"
        assert normalize_escapes(code) == code

    def test_empty(self):
        """Empty and None input give an empty string."""
        assert normalize_escapes("") == ""
        assert normalize_escapes(None) == ""

    def test_string_literal_next_to_punctuation_is_rewritten(self):
        """The rules are lexical: string contents are not protected."""
        assert normalize_escapes('"a;\\n"') == '"a;\n"'
