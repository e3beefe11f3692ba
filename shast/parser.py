"""
Shell parser - turns script text into a shinline syntax tree.

The grammar lives in shast.grammar; this module runs it through Lark's Earley
parser and converts the resulting parse tree into the node models of
shast.nodes with the ScriptBuilder transformer.
"""
import re

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, VisitError
from pydantic import BaseModel

from shast.errors import ShellSyntaxError, ShinlineError, detect_common_error_patterns, get_line_context
from shast.grammar import shell_grammar
from shast.nodes import (
    ArithmeticExpansion,
    AssignmentWord,
    Case,
    CaseItem,
    CommandExpansion,
    Command,
    CompoundList,
    ExpansionLoc,
    For,
    Function,
    If,
    Loc,
    LogicalExpression,
    Name,
    ParameterExpansion,
    Pipeline,
    Position,
    Redirect,
    Script,
    Subshell,
    Until,
    While,
    Word,
)


class ParseOptions(BaseModel):
    """Options accepted by parse()."""
    insert_loc: bool = False


# --- Word expansions ---

_EXPANSION_RE = re.compile(r"""
    (?P<escape>\\.)
  | (?P<dquote>")
  | (?P<squote>'[^']*')
  | \$\(\((?P<arith>(?:[^()]|\([^()]*\))*)\)\)
  | \$\((?P<command>(?:[^()]|\([^()]*\))*)\)
  | `(?P<backquote>(?:[^`\\]|\\.)*)`
  | \$\{(?P<braced>[^}]*)\}
  | \$(?P<param>[A-Za-z_][A-Za-z0-9_]*|[0-9@*#?$!-])
""", re.VERBOSE | re.DOTALL)

_PARAMETER_RE = re.compile(
    r"^(?P<length>#)?(?P<parameter>[A-Za-z_][A-Za-z0-9_]*|[0-9]+|[@*#?$!-])"
    r"(?P<op>:[-=?+]|[-=?+]|##?|%%?|//?)?(?P<word>.*)$",
    re.DOTALL,
)

_PARAMETER_KINDS = {
    ":-": "default-value",
    "-": "default-value",
    ":=": "assign-default-value",
    "=": "assign-default-value",
    ":?": "indicate-error-if-null",
    "?": "indicate-error-if-null",
    ":+": "use-alternative-value",
    "+": "use-alternative-value",
    "%": "remove-smallest-suffix-pattern",
    "%%": "remove-largest-suffix-pattern",
    "#": "remove-smallest-prefix-pattern",
    "##": "remove-largest-prefix-pattern",
    "/": "replace-first",
    "//": "replace-all",
}


def _parameter_expansion(content, start, end):
    """Build a ParameterExpansion for the inside of ${...}."""
    loc = ExpansionLoc(start=start, end=end)
    match = _PARAMETER_RE.match(content)
    if not match:
        return ParameterExpansion(parameter=content, braced=True, loc=loc)
    if match.group("length"):
        return ParameterExpansion(
            parameter=match.group("parameter") + (match.group("op") or "") + match.group("word"),
            kind="string-length",
            op="#",
            braced=True,
            loc=loc,
        )
    op = match.group("op")
    return ParameterExpansion(
        parameter=match.group("parameter"),
        kind=_PARAMETER_KINDS.get(op),
        op=op,
        word=match.group("word") or None,
        braced=True,
        loc=loc,
    )


def find_expansions(text):
    """
    List the expansions of a word, in order of appearance.

    Anything inside single quotes is literal; double quotes do not stop
    expansion.

    Args:
        text: Raw word text as written in the source

    Returns:
        List of ArithmeticExpansion, CommandExpansion and ParameterExpansion nodes
    """
    expansions = []
    in_double = False
    pos = 0
    while pos < len(text):
        match = _EXPANSION_RE.match(text, pos)
        if not match:
            pos += 1
            continue
        kind = match.lastgroup
        start, end = match.span()
        if kind == "dquote":
            in_double = not in_double
        elif kind == "squote" and in_double:
            # A single quote inside double quotes is an ordinary character
            end = start + 1
        elif kind == "arith":
            expansions.append(ArithmeticExpansion(
                expression=match.group("arith"), loc=ExpansionLoc(start=start, end=end)))
        elif kind == "command":
            expansions.append(CommandExpansion(
                command=match.group("command"), loc=ExpansionLoc(start=start, end=end)))
        elif kind == "backquote":
            expansions.append(CommandExpansion(
                command=match.group("backquote"), backquoted=True, loc=ExpansionLoc(start=start, end=end)))
        elif kind == "braced":
            expansions.append(_parameter_expansion(match.group("braced"), start, end))
        elif kind == "param":
            expansions.append(ParameterExpansion(
                parameter=match.group("param"), loc=ExpansionLoc(start=start, end=end)))
        pos = end
    return expansions


_QUOTED_RE = re.compile(r"""'([^']*)'|"((?:[^"\\]|\\.)*)"|\\(.)""", re.DOTALL)


def unquote(text):
    """Apply shell quote removal to a literal word (no expansion is performed)."""
    def replacer(match):
        if match.group(1) is not None:
            return match.group(1)
        if match.group(2) is not None:
            return re.sub(r'\\([$`"\\\n])', r'\1', match.group(2))
        return match.group(3)

    return _QUOTED_RE.sub(replacer, text)


# --- Tree builder ---

class ScriptBuilder(Transformer):
    """
    Transforms a Lark parse tree of shell source into shinline nodes.

    Rule callbacks build statement nodes; token callbacks turn words and
    names into leaf nodes. Source ranges are only recorded when the builder
    is created with insert_loc=True.
    """

    def __init__(self, insert_loc=False):
        super().__init__()
        self.insert_loc = insert_loc

    def _loc(self, meta):
        if not self.insert_loc or meta.empty:
            return None
        return Loc(
            start=Position(row=meta.line, col=meta.column, char=meta.start_pos),
            end=Position(row=meta.end_line, col=meta.end_column, char=meta.end_pos),
        )

    def _token_loc(self, token):
        if not self.insert_loc:
            return None
        return Loc(
            start=Position(row=token.line, col=token.column, char=token.start_pos),
            end=Position(row=token.end_line, col=token.end_column, char=token.end_pos),
        )

    def _statements(self, items):
        commands = []
        for item in items:
            # A trailing '&' marks the statement before it as asynchronous
            if isinstance(item, Token):
                commands[-1].async_ = True
            else:
                commands.append(item)
        return commands

    def _word(self, cls, token):
        text = str(token)
        return cls(text=text, expansion=find_expansions(text), loc=self._token_loc(token))

    @v_args(meta=True)
    def start(self, meta, items):
        return Script(commands=self._statements(items), loc=self._loc(meta))

    @v_args(meta=True)
    def compound_list(self, meta, items):
        return CompoundList(commands=self._statements(items), loc=self._loc(meta))

    @v_args(meta=True)
    def logical(self, meta, items):
        left, op, right = items
        return LogicalExpression(
            op="and" if op.type == "AND_IF" else "or",
            left=left,
            right=right,
            loc=self._loc(meta),
        )

    @v_args(meta=True)
    def pipe_sequence(self, meta, items):
        return Pipeline(commands=list(items), loc=self._loc(meta))

    @v_args(meta=True)
    def bang_pipeline(self, meta, items):
        sequence = items[1]
        if isinstance(sequence, Pipeline):
            sequence.bang = True
            sequence.loc = self._loc(meta)
            return sequence
        return Pipeline(commands=[sequence], bang=True, loc=self._loc(meta))

    @v_args(meta=True)
    def simple_command(self, meta, items):
        """Split items into assignments/redirects, the command name, and its arguments."""
        prefix, suffix, name = [], [], None
        for item in items:
            if name is None and isinstance(item, Word):
                name = item
            elif name is None:
                prefix.append(item)
            else:
                suffix.append(item)
        return Command(name=name, prefix=prefix, suffix=suffix, loc=self._loc(meta))

    @v_args(meta=True)
    def redirect(self, meta, items):
        number_io = None
        if len(items) == 3:
            number_io = int(items[0])
            items = items[1:]
        op, file = items
        return Redirect(op=str(op), file=file, number_io=number_io, loc=self._loc(meta))

    @v_args(meta=True)
    def compound_command(self, meta, items):
        node, *redirects = items
        if redirects:
            node.redirections = list(redirects)
            node.loc = self._loc(meta)
        return node

    @v_args(meta=True)
    def brace_group(self, meta, items):
        body = items[0]
        body.loc = self._loc(meta)
        return body

    @v_args(meta=True)
    def subshell(self, meta, items):
        return Subshell(list=items[0], loc=self._loc(meta))

    @v_args(meta=True)
    def for_clause(self, meta, items):
        wordlist = items[1] if len(items) == 3 else []
        return For(name=items[0], wordlist=wordlist, do=items[-1], loc=self._loc(meta))

    def for_in(self, items):
        return list(items)

    @v_args(meta=True)
    def case_clause(self, meta, items):
        return Case(clause=items[0], cases=list(items[1:]), loc=self._loc(meta))

    @v_args(meta=True)
    def case_item(self, meta, items):
        body = items[1] if len(items) > 1 else CompoundList()
        return CaseItem(pattern=items[0], body=body, loc=self._loc(meta))

    def pattern(self, items):
        return list(items)

    def _if(self, meta, items):
        clause, then, *rest = items
        return If(clause=clause, then=then, else_=rest[0] if rest else None, loc=self._loc(meta))

    @v_args(meta=True)
    def if_clause(self, meta, items):
        return self._if(meta, items)

    @v_args(meta=True)
    def elif_part(self, meta, items):
        """An elif is an else branch holding a nested if."""
        return CompoundList(commands=[self._if(meta, items)], loc=self._loc(meta))

    def else_part(self, items):
        return items[0]

    @v_args(meta=True)
    def while_clause(self, meta, items):
        return While(clause=items[0], do=items[1], loc=self._loc(meta))

    @v_args(meta=True)
    def until_clause(self, meta, items):
        return Until(clause=items[0], do=items[1], loc=self._loc(meta))

    @v_args(meta=True)
    def function_def(self, meta, items):
        name, body, *redirects = items
        if not isinstance(body, CompoundList):
            body = CompoundList(commands=[body], loc=body.loc)
        return Function(name=name, body=body, redirections=list(redirects), loc=self._loc(meta))

    def WORD(self, token):
        return self._word(Word, token)

    def COMMAND_WORD(self, token):
        return self._word(Word, token)

    def ASSIGNMENT_WORD(self, token):
        return self._word(AssignmentWord, token)

    def NAME(self, token):
        return Name(text=str(token), loc=self._token_loc(token))

    def FUNCTION_NAME(self, token):
        return Name(text=str(token), loc=self._token_loc(token))


_PARSER = None


def get_parser():
    """Return the shared Lark parser, building it on first use."""
    global _PARSER
    if _PARSER is None:
        # Earley with the dynamic lexer: reserved words depend on position
        _PARSER = Lark(shell_grammar, parser='earley', propagate_positions=True)
    return _PARSER


def _syntax_error(error, source_code, filename):
    line_number = getattr(error, 'line', None)
    if line_number is not None and line_number < 1:
        line_number = None
    column = getattr(error, 'column', None) if line_number else None
    if isinstance(error, UnexpectedCharacters):
        message = f"Unexpected character {error.char!r}"
    elif isinstance(error, UnexpectedEOF):
        message = "Unexpected end of input"
        line_number = source_code.rstrip('\n').count('\n') + 1
    else:
        message = "Syntax error"

    suggestion, _error_type = detect_common_error_patterns(source_code)
    return ShellSyntaxError(
        message=message,
        line_number=line_number,
        column=column,
        context=get_line_context(source_code, line_number),
        suggestion=suggestion or "Check syntax around this line",
        filename=filename,
    )


def parse(source_code, options=None, filename=None):
    """
    Parse shell source into a Script tree.

    Args:
        source_code: Text of the script
        options: ParseOptions (or a dict of its fields); defaults apply when omitted
        filename: Only used to locate errors in messages

    Returns:
        The Script root node

    Raises:
        ShellSyntaxError: If the text is not valid in the supported shell syntax
    """
    if options is None:
        options = ParseOptions()
    elif isinstance(options, dict):
        options = ParseOptions.model_validate(options)

    try:
        tree = get_parser().parse(source_code)
    except UnexpectedInput as e:
        raise _syntax_error(e, source_code, filename) from e

    try:
        return ScriptBuilder(insert_loc=options.insert_loc).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ShinlineError):
            raise e.orig_exc
        raise
