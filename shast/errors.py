"""
Error handling utilities for the shinline transformer.
"""
import re


class ShinlineError(Exception):
    """Base exception for shinline errors with file, line numbers and hints."""
    title = "Transform Error"

    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None, filename=None):
        self.message = message
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        self.filename = filename
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = [f"\n❌ {self.title}"]
        if self.filename:
            lines.append(f" in {self.filename}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)


class ShellSyntaxError(ShinlineError):
    """The parser rejected the shell source."""
    title = "Syntax Error"


class ImportResolutionError(ShinlineError):
    """An import names a file that exists neither literally nor with the extension."""
    title = "Import Error"


class MalformedImportError(ShinlineError):
    """An import command without a path argument."""
    title = "Import Error"


class TraversalError(ShinlineError):
    """A visitor table or a visitor result that the traversal cannot apply."""
    title = "Traversal Error"


class CodegenError(ShinlineError):
    title = "Code Generation Error"


class ConfigError(ShinlineError):
    title = "Configuration Error"


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def _count_keyword(source_code, keyword):
    return len(re.findall(r'(?<![\w$-])' + keyword + r'(?![\w-])', source_code))


def detect_common_error_patterns(source_code):
    """Detect common shell mistakes and return a (suggestion, error_type) pair."""
    # Quotes: drop escaped characters first, then single-quoted spans
    stripped = re.sub(r'\\.', '', source_code)
    stripped = re.sub(r'#[^\n]*', '', stripped)
    without_single = re.sub(r"'[^']*'", '', stripped)
    if without_single.count("'") % 2:
        return "Unterminated single quote: add the closing '", "unterminated_single_quote"
    if re.sub(r'"[^"]*"', '', without_single).count('"') % 2:
        return 'Unterminated double quote: add the closing "', "unterminated_double_quote"

    code = re.sub(r'"[^"]*"', '""', without_single)

    pairs = [
        ("if", "fi", "unbalanced_if"),
        ("case", "esac", "unbalanced_case"),
    ]
    for opener, closer, error_type in pairs:
        opened = _count_keyword(code, opener)
        closed = _count_keyword(code, closer)
        if opened != closed:
            return f"Unbalanced '{opener}': found {opened} '{opener}' but {closed} '{closer}'", error_type

    loops = sum(_count_keyword(code, kw) for kw in ("for", "while", "until"))
    done = _count_keyword(code, "done")
    if loops != done:
        return f"Every loop needs 'do ... done': found {loops} loops but {done} 'done'", "unbalanced_loop"

    open_braces = code.count('{') - code.count('${')
    close_braces = code.count('}') - len(re.findall(r'\$\{[^}]*\}', code))
    if open_braces != close_braces:
        return f"Unmatched braces: found {open_braces} '{{' but {close_braces} '}}'", "unmatched_braces"

    open_parens = code.count('(')
    close_parens = code.count(')')
    if open_parens != close_parens and _count_keyword(code, "case") == 0:
        return f"Unmatched parentheses: found {open_parens} '(' but {close_parens} ')'", "unmatched_parens"

    return None, None
