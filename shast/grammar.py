"""
Shell Grammar Definition.

This module contains the Lark grammar for the subset of POSIX/bash syntax
shinline understands. It is meant for Lark's Earley parser with the dynamic
lexer, so terminals are matched in context: a reserved word is only a
keyword where a command name could start, and is a plain word elsewhere.
"""

# Characters that end a word when unquoted
_META = r"\s;&|<>()"

# One piece of a word: quoted spans, escapes, expansions or plain characters
_SEGMENT = (
    r"(?:'[^']*'"
    r'|"(?:[^"\\]|\\.)*"'
    r"|\\."
    r"|\$\(\((?:[^()]|\([^()]*\))*\)\)"
    r"|\$\((?:[^()]|\([^()]*\))*\)"
    r"|\$\{[^}]*\}"
    r"|`(?:[^`\\]|\\.)*`"
    r"|\$"
    r"|[^" + _META + r"'\"`\\$])"
)

# A word may not start a comment or be an io-number
_WORD_START = r"(?!#)(?!\d+[<>])"

_END = r"(?![^" + _META + r"])"

RESERVED_WORDS = (
    "if", "then", "else", "elif", "fi", "do", "done", "case", "esac",
    "while", "until", "for", "in", "function",
)

# Lone braces and "!" are reserved in command position only
_NOT_RESERVED = r"(?!(?:" + "|".join(RESERVED_WORDS) + r"|!|\{|\})" + _END + r")"

WORD_RE = _WORD_START + _SEGMENT + "+"
COMMAND_WORD_RE = _NOT_RESERVED + r"(?![A-Za-z_][A-Za-z0-9_]*=)" + WORD_RE
ASSIGNMENT_RE = r"[A-Za-z_][A-Za-z0-9_]*=" + _SEGMENT + "*"
FUNCTION_NAME_RE = _NOT_RESERVED + r"[A-Za-z_][A-Za-z0-9_:.@+-]*"


def _keyword(word):
    return "/" + word + _END + "/"


shell_grammar = r"""
    start: _NL* _term?

    // --- Statement lists ---
    compound_list: _NL* _term
    _term: and_or (_separator and_or)* _separator?
    _separator: ";" _NL* | AMP _NL* | _NL+
    _sequential_sep: ";" _NL* | _NL+

    ?and_or: pipeline
           | and_or AND_IF _NL* pipeline   -> logical
           | and_or OR_IF _NL* pipeline    -> logical

    ?pipeline: pipe_sequence
             | BANG pipe_sequence          -> bang_pipeline
    ?pipe_sequence: command ("|" _NL* command)*

    ?command: simple_command
            | compound_command
            | function_def

    // --- Simple commands ---
    simple_command: _prefix_item+ (COMMAND_WORD _suffix_item*)?
                  | COMMAND_WORD _suffix_item*
    _prefix_item: ASSIGNMENT_WORD | redirect
    _suffix_item: WORD | redirect
    redirect: IO_NUMBER? REDIRECT_OP WORD

    // --- Compound commands ---
    compound_command: _compound_body redirect*
    _compound_body: brace_group
                  | subshell
                  | for_clause
                  | case_clause
                  | if_clause
                  | while_clause
                  | until_clause

    brace_group: _LBRACE compound_list _RBRACE
    subshell: "(" compound_list ")"

    for_clause: _FOR NAME _for_words? _NL* _do_group
    _for_words: _NL* for_in _sequential_sep
              | _sequential_sep
    for_in: _IN WORD*
    _do_group: _DO compound_list _DONE

    case_clause: _CASE WORD _NL* _IN _NL* (case_item (_DSEMI _NL* case_item)* (_DSEMI _NL*)?)? _ESAC
    case_item: "("? pattern ")" (compound_list | _NL*)
    pattern: WORD ("|" WORD)*

    if_clause: _IF compound_list _THEN compound_list _else_branch? _FI
    _else_branch: elif_part | else_part
    elif_part: _ELIF compound_list _THEN compound_list _else_branch?
    else_part: _ELSE compound_list

    while_clause: _WHILE compound_list _NL* _do_group
    until_clause: _UNTIL compound_list _NL* _do_group

    // --- Functions ---
    function_def: FUNCTION_NAME "(" ")" _NL* _compound_body redirect*
                | _FUNCTION FUNCTION_NAME ("(" ")")? _NL* _compound_body redirect*

    // --- Terminals ---
    AND_IF: "&&"
    OR_IF: "||"
    AMP: "&"
    BANG: /!""" + _END + r"""/
    _DSEMI: ";;"
    _LBRACE: /\{""" + _END + r"""/
    _RBRACE: /\}""" + _END + r"""/
    _IF: """ + _keyword("if") + r"""
    _THEN: """ + _keyword("then") + r"""
    _ELSE: """ + _keyword("else") + r"""
    _ELIF: """ + _keyword("elif") + r"""
    _FI: """ + _keyword("fi") + r"""
    _DO: """ + _keyword("do") + r"""
    _DONE: """ + _keyword("done") + r"""
    _CASE: """ + _keyword("case") + r"""
    _ESAC: """ + _keyword("esac") + r"""
    _WHILE: """ + _keyword("while") + r"""
    _UNTIL: """ + _keyword("until") + r"""
    _FOR: """ + _keyword("for") + r"""
    _IN: """ + _keyword("in") + r"""
    _FUNCTION: """ + _keyword("function") + r"""

    IO_NUMBER: /\d+(?=[<>])/
    REDIRECT_OP: />>|>&|>\||<<-|<<|<&|<>|>|</
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    FUNCTION_NAME: /""" + FUNCTION_NAME_RE + r"""/
    ASSIGNMENT_WORD: /""" + ASSIGNMENT_RE + r"""/
    COMMAND_WORD: /""" + COMMAND_WORD_RE + r"""/
    WORD: /""" + WORD_RE + r"""/

    _NL: /(\r?\n[\t ]*)+/
    COMMENT: /#[^\n]*/
    WS: /[ \t]+/
    LINE_CONTINUATION: /\\\r?\n/

    %ignore WS
    %ignore COMMENT
    %ignore LINE_CONTINUATION
"""
