#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Discover the headers and sources a C/C++ translation unit depends on.

Version: 1.0.0

PURPOSE:
    Walks the #include directives of a root source file without invoking a
    compiler and reports the exact set of headers, implied source files and
    include directories, so a build system can declare precise dependency lists
    instead of globbing directories.

WHAT IT DOES:
    - Indexes every header below the declared include directories (-I DIR#ALIAS)
    - Follows quoted includes relative to the including file
    - Resolves angle-bracket includes through the include directory index,
      anything else is treated as an external system include
    - Adds foo.cpp to the sources whenever foo.h is reached and foo.cpp exists
    - Reports missing include targets and malformed directives as warnings
      without failing the run

OUTPUT:
    Text summary (default) or JSON on stdout, optional Graphviz edge dump and
    NetworkX graph export (.graphml, .dot, .gexf, .json).

REQUIREMENTS:
    - Python 3.8+
    - networkx, pydot, colorama

EXAMPLES:
    # Summarize dependencies of main.cpp
    ./sourceGraph.py src/main.cpp

    # Declare include directories; "#fmt" makes <fmt/core.h> resolve below third_party/fmt/include
    ./sourceGraph.py src/main.cpp -I include# -I third_party/fmt/include#fmt

    # Dump the raw include edges for Graphviz
    ./sourceGraph.py src/main.cpp -I include# --graphviz deps.dot
"""

import sys
import argparse
import logging
from typing import List, Optional

from sourcegraph.color_utils import Colors, print_error, print_success, print_warning, should_use_color
from sourcegraph.constants import (
    DEFAULT_COMPANION_SUFFIXES,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    SourceGraphError,
)
from sourcegraph.formatting import export_graph, format_graphviz, format_json, format_summary, format_warnings
from sourcegraph.include_index import parse_include_directory_spec
from sourcegraph.source_graph import GraphOptions, SourceGraph

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse and return command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Discover the headers and sources a C/C++ translation unit depends on.",
        epilog=f"Version {__version__}\n\nExamples:\n"
        f"  %(prog)s src/main.cpp\n"
        f"  %(prog)s src/main.cpp -I include# -I third_party/fmt/include#fmt\n"
        f"  %(prog)s src/main.cpp --format json\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("root_file", metavar="ROOT_FILE", help="Translation unit to analyze (e.g., src/main.cpp)")

    parser.add_argument(
        "-I",
        "--include",
        dest="include_dirs",
        action="append",
        default=[],
        metavar="DIR#ALIAS",
        help="Include directory to index, optionally followed by '#' and an alias prefix (can be used multiple times)",
    )

    parser.add_argument(
        "--companion-suffix",
        dest="companion_suffixes",
        action="append",
        metavar="SUFFIX",
        help=f"Suffix probed next to a header for its implementation file (default: {', '.join(DEFAULT_COMPANION_SUFFIXES)})",
    )

    parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format (default: text)")

    parser.add_argument("--graphviz", metavar="FILE", help="Write the include edges as a Graphviz digraph")

    parser.add_argument("--export", metavar="FILE", help="Export the graph via NetworkX (.graphml, .dot, .gexf, .json)")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose debug logging")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def make_options(args: argparse.Namespace) -> GraphOptions:
    companion_suffixes = tuple(args.companion_suffixes) if args.companion_suffixes else DEFAULT_COMPANION_SUFFIXES
    return GraphOptions(companion_suffixes=companion_suffixes, debug=args.verbose)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the include graph tool.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    args = parse_arguments(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    use_color = should_use_color(no_color=args.no_color)
    if not use_color:
        Colors.disable()

    try:
        include_directories = [parse_include_directory_spec(spec) for spec in args.include_dirs]
        graph = SourceGraph.build(args.root_file, include_directories, make_options(args))
    except SourceGraphError as e:
        print_error(str(e))
        return e.exit_code

    if args.format == "json":
        print(format_json(graph))
    else:
        print(format_summary(graph, use_color=use_color))
        warnings = format_warnings(graph, use_color=use_color)
        if warnings:
            print(warnings, file=sys.stderr)

    try:
        if args.graphviz:
            with open(args.graphviz, "w", encoding="utf-8") as f:
                f.write(format_graphviz(graph))
                f.write("\n")
            print_success(f"Exported Graphviz file to {args.graphviz}", file=sys.stderr)

        if args.export:
            export_graph(graph, args.export)
            print_success(f"Exported include graph to {args.export}", file=sys.stderr)
    except SourceGraphError as e:
        print_error(str(e))
        return e.exit_code
    except OSError as e:
        print_error(f"Failed to write output: {e}")
        return EXIT_RUNTIME_ERROR

    missing = graph.missing_includes()
    if missing:
        print_warning(f"{len(missing)} include target(s) could not be found")

    return EXIT_SUCCESS


def console_main() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print(f"\n{Colors.YELLOW}Interrupted by user{Colors.RESET}")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logging.critical("Unexpected error: %s", e, exc_info=True)
        print(f"\n{Colors.RED}Fatal error: {e}{Colors.RESET}")
        print(f"{Colors.YELLOW}Run with --verbose for more details{Colors.RESET}")
        sys.exit(EXIT_RUNTIME_ERROR)


if __name__ == "__main__":
    console_main()
