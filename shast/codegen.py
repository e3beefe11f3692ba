"""
Shinline Code Generator - turns a syntax tree back into shell source.

codegen() runs one traversal over the tree and installs a source rule on
every node. Rules are evaluated lazily: reading ``node.source`` (or calling
compute_source(node)) derives the text from the children's sources the first
time and memoizes it on that node instance.
"""
from shast.traverse import traverse

# A CompoundList under one of these is a '{ ... }' group, not a body
GROUP_PARENTS = frozenset({"Script", "CompoundList", "Pipeline", "LogicalExpression"})


def compute_source(node):
    """Return the (memoized) source text of a node that went through codegen()."""
    return node.compute_source()


def _sources(nodes):
    return [compute_source(n) for n in nodes]


def _tail(node):
    """Redirections and the '&' marker that follow a statement."""
    text = ""
    redirections = getattr(node, "redirections", None)
    if redirections:
        text += " " + " ".join(_sources(redirections))
    if getattr(node, "async_", False):
        text += " &"
    return text


class SourceGenerator:
    """
    Textual reconstruction rules, one method per node kind.

    Each method receives a node whose children already have their rules
    installed and returns the node's text.
    """

    def script(self, node):
        """Top-level statements, one per line."""
        return "\n".join(_sources(node.commands))

    def compound_list(self, node):
        """A statement list used as a body: statements joined by newlines."""
        return "\n".join(_sources(node.commands))

    def brace_group(self, node):
        """A statement list used as a statement of its own."""
        return "{\n" + self.compound_list(node) + "\n}" + _tail(node)

    def function(self, node):
        return f"{node.name.text}() {{\n  {compute_source(node.body)}\n}}" + _tail(node)

    def command(self, node):
        # Spaces around the name are kept even when prefix or suffix is empty
        name = compute_source(node.name) if node.name is not None else ""
        return " ".join(_sources(node.prefix)) + " " + name + " " + " ".join(_sources(node.suffix)) + _tail(node)

    def pipeline(self, node):
        bang = "! " if node.bang else ""
        return bang + " | ".join(_sources(node.commands)) + _tail(node)

    def logical_expression(self, node):
        op = " && " if node.op == "and" else " || "
        return compute_source(node.left) + op + compute_source(node.right) + _tail(node)

    def subshell(self, node):
        return "(" + compute_source(node.list) + ")" + _tail(node)

    def if_(self, node):
        """
        Clause and else statements are joined by spaces, then statements by
        newlines. Missing or empty branches contribute nothing.
        """
        text = "if " + " ".join(_sources(node.clause.commands)) + "\n"
        then = "\n".join(_sources(node.then.commands)) if node.then is not None else ""
        if then:
            text += "then\n" + then + "\n"
        otherwise = " ".join(_sources(node.else_.commands)) if node.else_ is not None else ""
        if otherwise:
            text += "else\n" + otherwise + "\n"
        return text + "\nfi" + _tail(node)

    def for_(self, node):
        head = "for " + node.name.text
        if node.wordlist:
            head += " in " + " ".join(_sources(node.wordlist))
        return head + "\ndo\n" + compute_source(node.do) + "\ndone" + _tail(node)

    def _loop(self, keyword, node):
        return f"{keyword} {compute_source(node.clause)}\ndo\n{compute_source(node.do)}\ndone" + _tail(node)

    def while_(self, node):
        return self._loop("while", node)

    def until(self, node):
        return self._loop("until", node)

    def case(self, node):
        items = "\n".join(_sources(node.cases))
        return f"case {compute_source(node.clause)} in\n{items}\nesac" + _tail(node)

    def case_item(self, node):
        return "|".join(_sources(node.pattern)) + ")\n" + compute_source(node.body) + "\n;;"

    def redirect(self, node):
        number_io = str(node.number_io) if node.number_io is not None else ""
        return number_io + node.op + compute_source(node.file)

    def text(self, node):
        """Words, assignments and names print their text as written."""
        return node.text

    def arithmetic_expansion(self, node):
        return f"$(({node.expression}))"

    def command_expansion(self, node):
        if node.backquoted:
            return f"`{node.command}`"
        return f"$({node.command})"

    def parameter_expansion(self, node):
        if node.kind == "string-length":
            return "${#" + node.parameter + "}"
        if not node.braced:
            return "$" + node.parameter
        return "${" + node.parameter + (node.op or "") + (node.word or "") + "}"


GENERATOR = SourceGenerator()

RULES = {
    "Script": GENERATOR.script,
    "Function": GENERATOR.function,
    "Command": GENERATOR.command,
    "Pipeline": GENERATOR.pipeline,
    "LogicalExpression": GENERATOR.logical_expression,
    "Subshell": GENERATOR.subshell,
    "If": GENERATOR.if_,
    "For": GENERATOR.for_,
    "While": GENERATOR.while_,
    "Until": GENERATOR.until,
    "Case": GENERATOR.case,
    "CaseItem": GENERATOR.case_item,
    "Redirect": GENERATOR.redirect,
    "Word": GENERATOR.text,
    "AssignmentWord": GENERATOR.text,
    "Name": GENERATOR.text,
    "ArithmeticExpansion": GENERATOR.arithmetic_expansion,
    "CommandExpansion": GENERATOR.command_expansion,
    "ParameterExpansion": GENERATOR.parameter_expansion,
}


def _install(rule):
    def handler(node, parent, root):
        return node.install_source_rule(rule)
    return handler


def _install_word(node, parent, root):
    for expansion in node.expansion:
        expansion.install_source_rule(RULES[expansion.type])
    return node.install_source_rule(GENERATOR.text)


def _install_compound_list(node, parent, root):
    if parent is not None and parent.type in GROUP_PARENTS:
        return node.install_source_rule(GENERATOR.brace_group)
    return node.install_source_rule(GENERATOR.compound_list)


CODEGEN_VISITOR = {node_type: _install(rule) for node_type, rule in RULES.items()}
CODEGEN_VISITOR["Word"] = _install_word
CODEGEN_VISITOR["AssignmentWord"] = _install_word
CODEGEN_VISITOR["CompoundList"] = _install_compound_list


def codegen(root):
    """
    Install source rules on every node of a tree.

    Composite nodes are rebuilt on the way (see shast.traverse), so use the
    returned tree, not the argument, to read source.

    Args:
        root: Root node, usually a Script

    Returns:
        The tree with a readable ``source`` on every node
    """
    return traverse(root, CODEGEN_VISITOR)
