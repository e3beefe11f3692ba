"""
Shinline introspection - lists the functions a script defines.

Used by the 'functions' command to preview what an import of a file would
bring in, and under which names.
"""
from shast.config import ResolverConfig
from shast.parser import ParseOptions, parse
from shast.resolver import module_name, top_level_functions
from shast.traverse import traverse


class FunctionCollector:
    """
    Collects function definitions at any depth of a tree.

    Unlike the code generator, the collector does not rewrite anything: its
    handler records the function and leaves the node in place.
    """

    def __init__(self):
        self.functions = []

    @property
    def visitor(self):
        return {"Function": self.function}

    def function(self, func, parent, root):
        """Record a function's name and the line it starts on."""
        self.functions.append({
            "type": "function",
            "name": func.name.text,
            "line": func.loc.start.row if func.loc else None,
            "nested": parent is not None and parent.type != "Script",
        })


def list_functions(script):
    """
    Extract every function definition of a parsed script.

    Args:
        script: Script tree (parsed with insert_loc for line numbers)

    Returns:
        List of dicts with 'type', 'name', 'line' and 'nested', in the order
        the traversal completes them (inner functions before outer ones)
    """
    collector = FunctionCollector()
    traverse(script, collector.visitor)
    return collector.functions


def exported_functions(path, config=None):
    """
    Names an 'import' of path would define.

    Args:
        path: Shell file to inspect
        config: ResolverConfig for the name separator

    Returns:
        List of dicts with the original 'name', the 'qualified' name and 'line'
    """
    config = config or ResolverConfig()
    with open(path, 'r') as f:
        script = parse(f.read(), ParseOptions(insert_loc=True), filename=path)

    module = module_name(path)
    return [
        {
            "type": "function",
            "name": func.name.text,
            "qualified": f"{module}{config.separator}{func.name.text}",
            "line": func.loc.start.row if func.loc else None,
        }
        for func in top_level_functions(script)
    ]
