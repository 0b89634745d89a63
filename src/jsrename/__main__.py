"""CLI entry point: `jsrename a.js b.js --at a.js:120` or `python -m jsrename ...`."""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple


def _parse_position(text: str) -> Optional[Tuple[str, int]]:
    file, sep, offset = text.rpartition(":")
    if not sep or not offset.isdigit():
        return None
    return str(Path(file)), int(offset)


def format_groups(groups, sources: Dict[str, str], color: bool = False) -> str:
    """One line per range (`file:line:col-line:col  text`), groups separated by a rule."""
    from .shared.errors import BOLD, GREY, style
    from .utils.config import GROUP_SEPARATOR_CHAR, GROUP_SEPARATOR_WIDTH

    blocks: List[str] = []
    for group in groups:
        lines = []
        for rng in group:
            source = sources.get(rng.file)
            text = rng.text(source) if source is not None else ""
            lines.append(f"{rng}  " + style(text, BOLD, color=color))
        blocks.append("\n".join(lines))
    separator = "\n" + style(GROUP_SEPARATOR_CHAR * GROUP_SEPARATOR_WIDTH, GREY, color=color) + "\n"
    return separator.join(blocks)


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .engine.buffer import JavaScriptBuffer
    from .shared.errors import ErrorReporter, JsRenameError, use_color
    from .utils.io_utils import read_source_file

    parser = argparse.ArgumentParser(prog="jsrename", description="Show which JavaScript tokens rename together.")
    parser.add_argument("files", type=Path, nargs="+", help="JavaScript source files")
    query = parser.add_mutually_exclusive_group(required=True)
    query.add_argument("--at", metavar="FILE:OFFSET", help="Rename the identifier at a character offset")
    query.add_argument("--property", metavar="NAME", help="Rename every property called NAME")
    parser.add_argument("--verbose", action="store_true", help="Log analysis statistics")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    sources: Dict[str, str] = {}
    for path in args.files:
        if not path.is_file():
            sys.stderr.write(f"jsrename: error: file not found: {path}\n")
            return 1
        try:
            sources[str(path)] = read_source_file(path)
        except (OSError, UnicodeDecodeError) as e:
            sys.stderr.write(f"jsrename: error: could not read file: {e}\n")
            return 1

    reporter = ErrorReporter(sources)
    buffer = JavaScriptBuffer()
    try:
        for file, source in sources.items():
            buffer.add(file, source)

        if args.property is not None:
            groups = buffer.rename_property_name(args.property)
        else:
            position = _parse_position(args.at)
            if position is None:
                sys.stderr.write(f"jsrename: error: expected FILE:OFFSET, got {args.at!r}\n")
                return 1
            file, offset = position
            if file not in sources:
                sys.stderr.write(f"jsrename: error: {file} is not among the loaded files\n")
                return 1
            groups = buffer.rename_token_at(file, offset)
            if groups is None:
                sys.stderr.write(f"jsrename: no identifier at {file}:{offset}\n")
                return 1
    except JsRenameError as e:
        reporter.report(e)
        sys.stderr.write(reporter.format_all_errors(color=use_color()) + "\n")
        return 1

    if groups:
        print(format_groups(groups, sources, color=use_color() and sys.stdout.isatty()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
