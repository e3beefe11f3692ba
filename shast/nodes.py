"""
Shell syntax tree model.

Every node kind produced by the parser is a pydantic model tagged with a
``type`` literal, so a tree can be dumped to (and rebuilt from) the JSON
shape used by the bash-parser family of tools. Python keywords are exposed
with a trailing underscore (``else_``, ``async_``) and serialized under
their original names.

Nodes carry no behavior beyond their textual ``source``, which is only
available once the code generator has installed a rule on them.
"""
from typing import Annotated, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from shast.errors import CodegenError


class Position(BaseModel):
    """A point in the parsed text (1-based row/col, 0-based char offset)."""
    row: int
    col: int
    char: int


class Loc(BaseModel):
    """Source range of a node."""
    start: Position
    end: Position


class ExpansionLoc(BaseModel):
    """Character range of an expansion inside its owning word."""
    start: int
    end: int


class Node(BaseModel):
    """Base class of every tree node."""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    loc: Optional[Loc] = None

    _source_rule: Optional[Callable] = PrivateAttr(default=None)
    _source_cache: Optional[str] = PrivateAttr(default=None)

    def install_source_rule(self, rule):
        """Attach the function that derives this node's text from its children."""
        self._source_rule = rule
        return self

    def forget_source(self):
        """Drop the memoized text (used on freshly copied nodes)."""
        self._source_cache = None
        return self

    def compute_source(self):
        """
        Return the textual form of this node.

        Computed on first request from the children's current text and
        memoized for the lifetime of this node instance.

        Raises:
            CodegenError: If no source rule has been installed on the node
        """
        if self._source_cache is None:
            if self._source_rule is None:
                raise CodegenError(
                    f"No source available for {self.type} node",
                    suggestion="Run codegen() on the tree before reading .source",
                )
            self._source_cache = self._source_rule(self)
        return self._source_cache

    @property
    def source(self):
        return self.compute_source()

    def __str__(self):
        return self.compute_source()


class Statement(Node):
    """A node that can appear in a statement list."""
    async_: bool = Field(default=False, alias="async")


# --- Expansions ---

class ArithmeticExpansion(Node):
    type: Literal["ArithmeticExpansion"] = "ArithmeticExpansion"
    expression: str
    resolved: bool = False
    loc: Optional[ExpansionLoc] = None


class CommandExpansion(Node):
    type: Literal["CommandExpansion"] = "CommandExpansion"
    command: str
    backquoted: bool = False
    resolved: bool = False
    loc: Optional[ExpansionLoc] = None


class ParameterExpansion(Node):
    type: Literal["ParameterExpansion"] = "ParameterExpansion"
    parameter: str
    kind: Optional[str] = None
    word: Optional[str] = None
    op: Optional[str] = None
    braced: bool = False
    loc: Optional[ExpansionLoc] = None


ExpansionNode = Annotated[
    Union[ArithmeticExpansion, CommandExpansion, ParameterExpansion],
    Field(discriminator="type"),
]


# --- Leaves ---

class Word(Node):
    type: Literal["Word"] = "Word"
    text: str
    expansion: List[ExpansionNode] = Field(default_factory=list)


class AssignmentWord(Node):
    type: Literal["AssignmentWord"] = "AssignmentWord"
    text: str
    expansion: List[ExpansionNode] = Field(default_factory=list)


class Name(Node):
    type: Literal["Name"] = "Name"
    text: str


class Redirect(Node):
    type: Literal["Redirect"] = "Redirect"
    op: str
    file: Word
    number_io: Optional[int] = Field(default=None, alias="numberIo")


PrefixNode = Annotated[Union[AssignmentWord, Redirect], Field(discriminator="type")]
SuffixNode = Annotated[Union[Word, Redirect], Field(discriminator="type")]

StatementNode = Annotated[
    Union[
        "LogicalExpression",
        "Pipeline",
        "Command",
        "Function",
        "CompoundList",
        "Subshell",
        "For",
        "Case",
        "If",
        "While",
        "Until",
    ],
    Field(discriminator="type"),
]


# --- Statements ---

class Command(Statement):
    type: Literal["Command"] = "Command"
    name: Optional[Word] = None
    prefix: List[PrefixNode] = Field(default_factory=list)
    suffix: List[SuffixNode] = Field(default_factory=list)


class CompoundList(Statement):
    type: Literal["CompoundList"] = "CompoundList"
    commands: List[StatementNode] = Field(default_factory=list)
    redirections: List[Redirect] = Field(default_factory=list)


class Function(Statement):
    type: Literal["Function"] = "Function"
    name: Name
    body: CompoundList
    redirections: List[Redirect] = Field(default_factory=list)


class Pipeline(Statement):
    type: Literal["Pipeline"] = "Pipeline"
    commands: List[StatementNode] = Field(default_factory=list)
    bang: bool = False


class LogicalExpression(Statement):
    type: Literal["LogicalExpression"] = "LogicalExpression"
    op: Literal["and", "or"]
    left: StatementNode
    right: StatementNode


class Subshell(Statement):
    type: Literal["Subshell"] = "Subshell"
    list: CompoundList
    redirections: List[Redirect] = Field(default_factory=list)


class For(Statement):
    type: Literal["For"] = "For"
    name: Name
    wordlist: List[Word] = Field(default_factory=list)
    do: CompoundList
    redirections: List[Redirect] = Field(default_factory=list)


class CaseItem(Node):
    type: Literal["CaseItem"] = "CaseItem"
    pattern: List[Word] = Field(default_factory=list)
    body: CompoundList


class Case(Statement):
    type: Literal["Case"] = "Case"
    clause: Word
    cases: List[CaseItem] = Field(default_factory=list)
    redirections: List[Redirect] = Field(default_factory=list)


class If(Statement):
    type: Literal["If"] = "If"
    clause: CompoundList
    then: Optional[CompoundList] = None
    else_: Optional[CompoundList] = Field(default=None, alias="else")
    redirections: List[Redirect] = Field(default_factory=list)


class While(Statement):
    type: Literal["While"] = "While"
    clause: CompoundList
    do: CompoundList
    redirections: List[Redirect] = Field(default_factory=list)


class Until(Statement):
    type: Literal["Until"] = "Until"
    clause: CompoundList
    do: CompoundList
    redirections: List[Redirect] = Field(default_factory=list)


class Script(Node):
    """Root of a parsed file: the ordered top-level statements."""
    type: Literal["Script"] = "Script"
    commands: List[StatementNode] = Field(default_factory=list)


NODE_CLASSES = {
    cls.__name__: cls
    for cls in (
        Script, Pipeline, LogicalExpression, Command, Function, Name,
        CompoundList, Subshell, For, Case, CaseItem, If, While, Until,
        Redirect, Word, AssignmentWord,
        ArithmeticExpansion, CommandExpansion, ParameterExpansion,
    )
}

NODE_TYPES = frozenset(NODE_CLASSES)

for _cls in NODE_CLASSES.values():
    _cls.model_rebuild()


def load_tree(data):
    """Rebuild a tree from its JSON-shaped dict (as produced by ``model_dump(by_alias=True)``)."""
    return NODE_CLASSES[data["type"]].model_validate(data)
