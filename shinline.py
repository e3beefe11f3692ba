import argparse
import os
import sys

from compiler import analyze_source, compile_source, dump_ast
from shast.config import CONFIG_FILE, load_config, write_default_config
from shast.errors import ShinlineError
from shast.log import log, set_verbose


def read_input(filepath):
    """Return (filename, source) for a path, or for '-' meaning stdin."""
    if filepath is None or filepath == "-":
        return None, sys.stdin.read()
    if not os.path.exists(filepath):
        print(f"Error: File '{filepath}' not found.", file=sys.stderr)
        sys.exit(1)
    with open(filepath, 'r') as f:
        return filepath, f.read()


def fail(error):
    print(f"Error: Transform Failed:\n{error}", file=sys.stderr)
    sys.exit(1)


def cmd_build(args):
    filename, source_code = read_input(args.filename)
    try:
        config = load_config(args.config)
        output = compile_source(filename, source_code, config)
    except ShinlineError as e:
        fail(e)

    if args.output:
        with open(args.output, 'w') as f:
            f.write(output + "\n")
        log(f"Wrote {args.output}")
    else:
        print(output)


def cmd_ast(args):
    filename, source_code = read_input(args.filename)
    try:
        config = load_config(args.config)
        print(dump_ast(filename, source_code, config, resolve=args.resolve))
    except ShinlineError as e:
        fail(e)


def cmd_functions(args):
    if not os.path.exists(args.filename):
        print(f"Error: File '{args.filename}' not found.", file=sys.stderr)
        sys.exit(1)
    try:
        config = load_config(args.config)
        functions = analyze_source(args.filename, config)
    except ShinlineError as e:
        fail(e)

    if not functions:
        log(f"No functions defined in {args.filename}")
    for func in functions:
        print(f"{func['qualified']}\t(line {func['line']})")


def cmd_init(args):
    if os.path.exists(CONFIG_FILE):
        log(f"{CONFIG_FILE} already exists, leaving it untouched")
        return
    config = write_default_config(CONFIG_FILE)
    log(f"Created {CONFIG_FILE} (extension '{config.extension}', separator '{config.separator}')")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Shinline - inline shell imports")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Configuration file (default: ./{CONFIG_FILE} if present)")
    subparsers = parser.add_subparsers(dest="command")

    build = subparsers.add_parser("build", help="Inline imports and print the resulting script")
    build.add_argument("filename", nargs="?", default="-", help="Script to transform (default: read from stdin)")
    build.add_argument("-o", "--output", help="Write the result to this file instead of stdout")

    ast = subparsers.add_parser("ast", help="Print the syntax tree as JSON")
    ast.add_argument("filename", nargs="?", default="-")
    ast.add_argument("--resolve", action="store_true", help="Inline imports before printing")

    subparsers.add_parser("functions", help="List the functions an import of a file would define").add_argument("filename")
    subparsers.add_parser("init", help="Write a default configuration file")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.command == "build": cmd_build(args)
    elif args.command == "ast": cmd_ast(args)
    elif args.command == "functions": cmd_functions(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()


if __name__ == "__main__":
    main()
