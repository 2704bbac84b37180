"""Extractly CLI entry point.

Allows running via `python -m extractly` and provides the console script
defined in `pyproject.toml`.

Usage:
    extractly [--verbose] [RESULT.json] [--history HISTORY.json]
    extractly export [--history] FILE [-o DIR]
    extractly --version
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from .errors import ValidationError
from .version import get_version_string

USAGE = (
    "usage: extractly [--verbose] [RESULT.json] [--history HISTORY.json]\n"
    "       extractly export [--history] FILE [-o DIR]\n"
    "       extractly --version"
)


def run_export(args: list[str]) -> int:
    """Export an extraction result (or a history dump) to PDF."""
    from .export_output import ExportOutput
    from .records import ExtractionResult, HistoryPage, load_json_file

    history = False
    directory: Optional[str] = None
    filename: Optional[str] = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--history":
            history = True
        elif arg in ("-o", "--output-dir"):
            if i + 1 >= len(args):
                print(f"{arg} needs a directory", file=sys.stderr)
                return 2
            i += 1
            directory = args[i]
        elif filename is None:
            filename = arg
        else:
            print(USAGE, file=sys.stderr)
            return 2
        i += 1

    if filename is None:
        print(USAGE, file=sys.stderr)
        return 2

    try:
        data = load_json_file(filename)
        output = ExportOutput()
        if history:
            ok, error = output.export_history(HistoryPage.from_dict(data).content, directory)
        else:
            ok, error = output.export_summary(ExtractionResult.from_dict(data),
                                              directory=directory)
    except (ValidationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not ok:
        print(error, file=sys.stderr)
        return 1
    warning = output.pdf_generator.get_unprintable_warning()
    if warning:
        print(warning, file=sys.stderr)
    print(f"Wrote {output.last_path}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if "--verbose" in args:
        args.remove("--verbose")
        logging.basicConfig(level=logging.DEBUG)

    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0
    if args and args[0] in ("-h", "--help"):
        print(USAGE)
        return 0
    if args and args[0] == "export":
        return run_export(args[1:])

    history_filename: Optional[str] = None
    if "--history" in args:
        index = args.index("--history")
        if index + 1 >= len(args):
            print("--history needs a file", file=sys.stderr)
            return 2
        history_filename = args[index + 1]
        del args[index:index + 2]
    if len(args) > 1:
        print(USAGE, file=sys.stderr)
        return 2

    # Lazy import to avoid importing UI deps for export and --version
    from .textual_app import ExtractlyApp
    app = ExtractlyApp(filename=args[0] if args else None,
                       history_filename=history_filename)
    app.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
