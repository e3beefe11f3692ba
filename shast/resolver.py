"""
Import resolution for shell scripts.

Replaces every 'import <path>' command with the functions defined at the
top level of that file, renamed to '<module>::<function>'. Imported files
are parsed on their own; their imports are not followed.
"""
import os

from shast.config import ResolverConfig
from shast.errors import ImportResolutionError, MalformedImportError
from shast.log import debug_log
from shast.nodes import Word
from shast.parser import parse, unquote

IMPORT_COMMAND = "import"


def candidate_paths(base_dir, argument, extension=".sh"):
    """The literal path of an import, then the same path with the extension."""
    path = os.path.abspath(os.path.join(base_dir, argument))
    return [path, path + extension]


def module_name(path):
    """Base name of an imported file without its extension."""
    return os.path.splitext(os.path.basename(path))[0]


def top_level_functions(script):
    """Function definitions placed directly in a script (nested ones are skipped)."""
    return [cmd for cmd in script.commands if cmd.type == "Function"]


def qualify(func, module, separator="::"):
    """Return a copy of a function renamed '<module><separator><name>'."""
    name = func.name.model_copy(update={"text": f"{module}{separator}{func.name.text}"})
    return func.model_copy(update={"name": name}).forget_source()


class ImportResolver:
    """
    Visitor that inlines imported functions.

    Args:
        filename: Path of the file being processed; imports resolve against
            its directory. None means the current working directory.
        config: ResolverConfig with the file extension and name separator
    """

    def __init__(self, filename=None, config=None):
        self.filename = filename
        self.config = config or ResolverConfig()
        self.base_dir = os.path.dirname(os.path.abspath(filename)) if filename else os.getcwd()

    @property
    def visitor(self):
        return {"Command": self.command}

    def command(self, cmd, parent, root):
        """Dispatch on the command name; anything but 'import' is left alone."""
        if cmd.name is None:
            return None
        if cmd.name.text == IMPORT_COMMAND:
            return self.import_module(cmd)
        return None

    def _line(self, cmd):
        return cmd.loc.start.row if cmd.loc else None

    def resolve_path(self, argument, line_number=None):
        """
        Find the file an import argument refers to.

        Args:
            argument: The import argument, quotes already removed
            line_number: Line of the import, for error messages

        Returns:
            Absolute path of the imported file

        Raises:
            ImportResolutionError: If neither candidate exists
        """
        candidates = candidate_paths(self.base_dir, argument, self.config.extension)
        for path in candidates:
            if os.path.isfile(path):
                return path
        raise ImportResolutionError(
            f"Import not found: {argument}",
            line_number=line_number,
            context=f"tried {' and '.join(candidates)}",
            suggestion="Import paths are relative to the importing file",
            filename=self.filename,
        )

    def import_argument(self, cmd):
        words = [arg for arg in cmd.suffix if isinstance(arg, Word)]
        if not words:
            raise MalformedImportError(
                "'import' needs a path argument",
                line_number=self._line(cmd),
                suggestion="Use: import <path>",
                filename=self.filename,
            )
        return unquote(words[0].text)

    def import_module(self, cmd):
        """Parse the imported file and return its qualified top-level functions."""
        argument = self.import_argument(cmd)
        path = self.resolve_path(argument, self._line(cmd))

        with open(path, 'r') as f:
            code = f.read()

        script = parse(code, filename=path)
        module = module_name(path)
        funcs = [qualify(func, module, self.config.separator) for func in top_level_functions(script)]
        debug_log(f"import {argument}: {len(funcs)} function(s) from {path}")
        return funcs
