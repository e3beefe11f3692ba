"""
Unit tests for error formatting and hints.
"""
import pytest

from shast.errors import (
    ImportResolutionError,
    ShellSyntaxError,
    ShinlineError,
    detect_common_error_patterns,
    get_line_context,
)


class TestErrorFormatting:
    """Tests for the formatted error message."""

    def test_full_message(self):
        error = ShellSyntaxError(
            "Unexpected character ')'",
            line_number=3,
            column=9,
            context="echo hi )",
            suggestion="Check syntax around this line",
            filename="deploy.sh",
        )
        message = str(error)
        assert "Syntax Error in deploy.sh at line 3, column 9:" in message
        assert "   Unexpected character ')'" in message
        assert "   > echo hi )" in message
        assert "Check syntax around this line" in message

    def test_minimal_message(self):
        message = str(ImportResolutionError("Import not found: util"))
        assert "Import Error:" in message
        assert " at line" not in message
        assert " in " not in message.split(":")[0]

    def test_hierarchy(self):
        with pytest.raises(ShinlineError):
            raise ImportResolutionError("missing")


class TestLineContext:
    """Tests for get_line_context()."""

    def test_line(self):
        assert get_line_context("a\n  b  \nc", 2) == "b"

    @pytest.mark.parametrize("line_number", [None, 0, 4])
    def test_out_of_range(self, line_number):
        assert get_line_context("a\nb\nc", line_number) is None


class TestErrorPatterns:
    """Tests for detect_common_error_patterns()."""

    @pytest.mark.parametrize("code, error_type", [
        ("echo 'oops", "unterminated_single_quote"),
        ('echo "oops', "unterminated_double_quote"),
        ("if true; then echo", "unbalanced_if"),
        ("case $x in a) ;; ", "unbalanced_case"),
        ("while true; do sleep 1", "unbalanced_loop"),
        ("f() { echo", "unmatched_braces"),
        ("(cd /tmp", "unmatched_parens"),
    ])
    def test_detected(self, code, error_type):
        suggestion, detected = detect_common_error_patterns(code)
        assert detected == error_type
        assert suggestion

    @pytest.mark.parametrize("code", [
        "echo hi",
        "echo \"say 'hi'\"",
        "if true; then echo ok; fi",
        "echo ${HOME} $(date)",
        "echo 'if' # while",
        "case $x in a) echo;; esac",
    ])
    def test_clean_code(self, code):
        assert detect_common_error_patterns(code) == (None, None)
