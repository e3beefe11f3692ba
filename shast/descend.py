"""
Default descent into node children.

For every composite node type, the descend visitor visits each child field
through the full traversal chain and rebuilds a node of the same type from
the results. Sequence fields splice in list results and drop removed items;
single fields take the replacement as is.
"""
from shast.errors import TraversalError

# Per node type: (single-node fields, sequence fields), in source order
DESCEND_FIELDS = {
    "Script": ((), ("commands",)),
    "Pipeline": ((), ("commands",)),
    "LogicalExpression": (("left", "right"), ()),
    "Command": (("name",), ("prefix", "suffix")),
    "Function": (("name", "body"), ("redirections",)),
    "CompoundList": ((), ("commands", "redirections")),
    "Subshell": (("list",), ("redirections",)),
    "For": (("name", "do"), ("wordlist", "redirections")),
    "Case": (("clause",), ("cases", "redirections")),
    "CaseItem": (("body",), ("pattern",)),
    "If": (("clause", "then", "else_"), ("redirections",)),
    "While": (("clause", "do"), ("redirections",)),
    "Until": (("clause", "do"), ("redirections",)),
    "Redirect": (("file",), ()),
}


def _visit_sequence(visit_child, items):
    out = []
    for item in items:
        result = visit_child(item)
        if result is None:
            continue
        if isinstance(result, list):
            out.extend(r for r in result if r is not None)
        else:
            out.append(result)
    return out


def _visit_single(visit_child, node, field):
    result = visit_child(getattr(node, field))
    if isinstance(result, list):
        if len(result) != 1:
            raise TraversalError(
                f"Visitor returned {len(result)} nodes for {node.type}.{field}, which holds a single node",
                suggestion="Return a list only for sequence fields such as 'commands'",
            )
        result = result[0]
    if result is None and getattr(node, field) is not None and type(node).model_fields[field].is_required():
        raise TraversalError(f"Visitor removed the required {node.type}.{field}")
    return result


def make_descend_visitor(traverse_node):
    """
    Build the descend visitor table.

    Args:
        traverse_node: Callable taking a parent node and returning the function
            that visits one of its children

    Returns:
        Dict mapping composite node types to handlers (node, parent, root) -> node
    """
    def descend_into(single_fields, sequence_fields):
        def handler(node, parent, root):
            visit_child = traverse_node(node)
            fields = {}
            for field in single_fields:
                fields[field] = _visit_single(visit_child, node, field)
            for field in sequence_fields:
                fields[field] = _visit_sequence(visit_child, getattr(node, field))
            return node.model_copy(update=fields).forget_source()
        return handler

    return {
        node_type: descend_into(single_fields, sequence_fields)
        for node_type, (single_fields, sequence_fields) in DESCEND_FIELDS.items()
    }
