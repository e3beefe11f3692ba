# Shinline - Shell Import Inliner
"""
Core modules for shinline:
- errors: Error types with file/line context and hints
- nodes: Syntax tree models for shell scripts
- grammar: Lark grammar for the supported shell syntax
- parser: Shell text to syntax tree
- traverse: Visitor-driven tree rewriting
- resolver: Import resolution (inlines imported functions)
- codegen: Syntax tree back to shell source
- introspection: Function listing for scripts
- config: Resolver settings
"""

from .errors import ShinlineError
from .nodes import Script, load_tree
from .parser import ParseOptions, parse
from .traverse import REMOVE, traverse
from .resolver import ImportResolver
from .codegen import codegen, compute_source
from .introspection import list_functions
from .config import ResolverConfig, load_config

__all__ = [
    'ShinlineError',
    'Script',
    'load_tree',
    'ParseOptions',
    'parse',
    'REMOVE',
    'traverse',
    'ImportResolver',
    'codegen',
    'compute_source',
    'list_functions',
    'ResolverConfig',
    'load_config',
]
