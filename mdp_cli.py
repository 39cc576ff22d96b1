#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Command Line Entry Point
====================================================
Copyright (c) 2025 PNGN-Tec LLC

Usage
=====
    mdp README.md            Render one file to stdout and exit
    mdp                      Browse Markdown files under the current directory
    mdp --list-themes        Show the built-in theme names

Exit Status
===========
- 0: Success
- 1: The file could not be read
- 2: Usage error (bad flag, unknown theme, invalid width)
- 130: Interrupted
"""

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

from mdp_config import LoggingConfig, configure_logging, get_config
from mdp_finder import FinderConfig
from mdp_output import AnsiStreamSink
from mdp_parser import MarkdownFileError, read_markdown_file
from mdp_render import render_markdown
from mdp_theme import available_themes, get_theme

__version__ = "0.1.0"

# Configure logging
logger = logging.getLogger('mdp_cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mdp',
        description='Preview Markdown files in the terminal')
    parser.add_argument('file', nargs='?', metavar='FILE',
                        help='Markdown file to render (omit to browse the current directory)')

    finder = parser.add_argument_group('file browser')
    finder.add_argument('--hidden', action='store_true',
                        help='Include hidden files and directories')
    finder.add_argument('--no-ignore', action='store_true',
                        help='Do not respect .gitignore, .ignore or git exclude files')
    finder.add_argument('--no-ignore-parent', action='store_true',
                        help='Do not respect ignore files in parent directories')
    finder.add_argument('--no-global-ignore-file', action='store_true',
                        help='Do not respect the global git ignore file')

    output = parser.add_argument_group('output')
    output.add_argument('--theme', metavar='NAME',
                        help='Color theme (default from MDP_THEME or solarized-osaka)')
    output.add_argument('--list-themes', action='store_true',
                        help='List available themes and exit')
    output.add_argument('--no-color', action='store_true',
                        help='Disable ANSI colors')
    output.add_argument('--width', type=int, metavar='N',
                        help='Terminal width used for horizontal rules')
    output.add_argument('--log-level', metavar='LEVEL',
                        help='Logging level written to stderr (default WARNING)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def use_color(args: argparse.Namespace, stream) -> bool:
    if args.no_color or os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = get_config()

    if args.log_level:
        try:
            configure_logging(LoggingConfig(level=args.log_level, format=config.logging.format))
        except ValueError as e:
            parser.error(str(e))
    else:
        configure_logging(config.logging)

    if args.list_themes:
        for name in available_themes():
            print(name)
        return 0

    try:
        theme = get_theme(args.theme or config.theme)
    except KeyError as e:
        parser.error(e.args[0])
    theme.validate()

    render_config = config.render
    if args.width is not None:
        render_config = dataclasses.replace(render_config, width=args.width)
        try:
            render_config.validate()
        except ValueError as e:
            parser.error(str(e))

    try:
        if args.file is None:
            # Imported here so one-shot rendering never loads textual
            from mdp_tui import run_browser

            finder_config = FinderConfig(
                hidden=args.hidden,
                no_ignore=args.no_ignore,
                no_ignore_parent=args.no_ignore_parent,
                no_global_ignore_file=args.no_global_ignore_file,
            )
            run_browser(finder_config, theme, render_config)
            return 0

        source = read_markdown_file(args.file)
        sink = AnsiStreamSink(sys.stdout, color=use_color(args, sys.stdout))
        renderer = render_markdown(source, theme, sink, render_config)
        sys.stdout.flush()
        logger.debug(f"Render stats: {renderer.get_stats()}")
        return 0

    except MarkdownFileError as e:
        print(f"mdp: error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
