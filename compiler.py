import json

from shast.codegen import codegen
from shast.config import ResolverConfig
from shast.introspection import exported_functions
from shast.log import debug_log
from shast.parser import ParseOptions, parse
from shast.resolver import ImportResolver
from shast.traverse import traverse


class Context:
    """
    One run over a root script: parse, resolve imports, generate source.

    Args:
        filename: Path of the root script (None when reading stdin)
        source_code: Script text; read from filename when omitted
        config: ResolverConfig for import resolution
        options: ParseOptions for the root script
    """

    def __init__(self, filename=None, source_code=None, config=None, options=None):
        self.filename = filename
        self.config = config or ResolverConfig()
        self.options = options or ParseOptions()
        if source_code is None:
            with open(filename, 'r') as f:
                source_code = f.read()
        self.source_code = source_code
        self.ast = None

    def parse(self):
        debug_log(f"Parsing: {self.filename or '<stdin>'}")
        self.ast = parse(self.source_code, self.options, filename=self.filename)
        debug_log(f"Parsed {len(self.ast.commands)} top-level statement(s)")
        return self.ast

    def resolve_imports(self):
        resolver = ImportResolver(self.filename, self.config)
        self.ast = traverse(self.ast, resolver.visitor)
        debug_log(f"After imports: {len(self.ast.commands)} top-level statement(s)")
        return self.ast

    def process(self):
        """Run every stage and return the generated source text."""
        self.parse()
        self.resolve_imports()
        debug_log("Generating source")
        self.ast = codegen(self.ast)
        return self.ast.source


def compile_source(file_path, source_code=None, config=None):
    """
    Inline the imports of a script and return its regenerated source.

    Args:
        file_path: Path of the script; imports resolve against its directory
        source_code: Script text, when it does not come from file_path (stdin)
        config: ResolverConfig; defaults apply when omitted

    Returns:
        The transformed script as a string
    """
    return Context(file_path, source_code, config).process()


def dump_ast(file_path, source_code=None, config=None, resolve=False):
    """
    Return the syntax tree of a script as JSON (original field names).

    Args:
        resolve: Inline imports before dumping
    """
    context = Context(file_path, source_code, config, ParseOptions(insert_loc=True))
    context.parse()
    if resolve:
        context.resolve_imports()
    return json.dumps(context.ast.model_dump(by_alias=True, exclude_none=True), indent=2)


def analyze_source(file_path, config=None):
    """Functions an import of file_path would define."""
    return exported_functions(file_path, config)
