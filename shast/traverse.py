"""
Generic tree traversal.

A visitor is a dict mapping node type names ("Command", "If", ...) to
handlers called as handler(node, parent, root). The optional
"defaultMethod" entry handles every type without its own handler.

A handler's result replaces the node:
- a node replaces it,
- a list of nodes is spliced in its place (in sequence fields),
- None leaves the node unchanged,
- REMOVE deletes it.

Children are always descended into before the handler of their parent runs,
so a handler sees its node with already rewritten children.
"""
from functools import reduce

from shast.descend import make_descend_visitor
from shast.errors import TraversalError
from shast.nodes import NODE_TYPES

DEFAULT_METHOD = "defaultMethod"


class _Remove:
    """Marker returned by a handler to delete the visited node."""

    def __repr__(self):
        return "REMOVE"


REMOVE = _Remove()


def check_visitor(visitor):
    """Reject visitor tables with keys that are not node types."""
    unknown = set(visitor) - NODE_TYPES - {DEFAULT_METHOD}
    if unknown:
        raise TraversalError(
            f"Unknown node type(s) in visitor: {', '.join(sorted(unknown))}",
            suggestion=f"Valid keys are node type names or '{DEFAULT_METHOD}'",
        )


def visit(node, context, visitor):
    """
    Execute the visitor handler registered for the type of a node.

    Args:
        node: Node to visit; None is returned unchanged
        context: (parent, root) passed to the handler after the node
        visitor: A visitor table, or a list of tables applied one after the
            other, each receiving the previous result

    Returns:
        The resulting node, a list of nodes, or None when removed
    """
    if node is None:
        return None

    if isinstance(visitor, (list, tuple)):
        return reduce(lambda current, step: visit(current, context, step), visitor, node)

    if isinstance(node, list):
        return node

    handler = visitor.get(node.type) or visitor.get(DEFAULT_METHOD)
    if handler is None:
        return node

    out = handler(node, *context)
    if out is None:
        return node
    if out is REMOVE:
        return None
    return out


class Traversal:
    """One traversal of a tree with a user visitor."""

    def __init__(self, root, visitor):
        check_visitor(visitor)
        self.root = root
        self.visitor = visitor
        self.descend = make_descend_visitor(self.traverse_node)

    def traverse_node(self, parent):
        """Return a function that visits a child of parent: descend first, then the user visitor."""
        def visit_child(node):
            return visit(node, (parent, self.root), [self.descend, self.visitor])
        return visit_child

    def run(self):
        return self.traverse_node(None)(self.root)


def traverse(root, visitor):
    """
    Rewrite a tree with a visitor.

    Args:
        root: Root node of the tree
        visitor: Dict mapping node type names to handlers

    Returns:
        The rewritten root (or whatever the root's handler returned)

    Raises:
        TraversalError: If the visitor has unknown keys or returns a result
            a field cannot hold
    """
    return Traversal(root, visitor).run()
