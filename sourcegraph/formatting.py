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
"""Rendering and export of a built SourceGraph.

Nothing here writes to stdout; callers decide where the text goes. File export
goes through NetworkX so the same graph can be opened in yEd, Gephi or Graphviz.
"""

import os
import json
import logging
from typing import Any, Dict, List

import networkx as nx
from networkx.readwrite import json_graph

from .color_utils import Colors, colored
from .constants import GRAPHVIZ_GRAPH_NAME, SUPPORTED_GRAPH_FORMATS, ArgumentError
from .source_graph import NodeKind, SourceGraph

logger = logging.getLogger(__name__)


def _format_block(title: str, paths: Any, use_color: bool) -> List[str]:
    lines = [colored(title, Colors.CYAN, Colors.BRIGHT) if use_color else title]
    lines.extend(f"\t{path}" for path in paths)
    return lines


def format_summary(graph: SourceGraph, use_color: bool = False) -> str:
    """Format the human-readable result listing.

    Layout::

        Include Graph of <root>:
        Include Paths:
        \\t<dir>
        Headers:
        \\t<header>
        Inferred Sources:
        \\t<source>

    Args:
        graph: Built graph
        use_color: Colorize the block titles

    Returns:
        Multi-line string, blocks in accessor order
    """
    title = f"Include Graph of <{graph.root}>:"
    lines = [colored(title, Colors.WHITE, Colors.BRIGHT) if use_color else title]
    lines.extend(_format_block("Include Paths:", graph.include_paths, use_color))
    lines.extend(_format_block("Headers:", graph.headers, use_color))
    lines.extend(_format_block("Inferred Sources:", graph.sources, use_color))
    return "\n".join(lines)


def format_warnings(graph: SourceGraph, use_color: bool = False) -> str:
    """Format recoverable diagnostics, one per line. Empty string when there are none."""
    if not graph.diagnostics:
        return ""

    title = f"Warnings ({len(graph.diagnostics)}):"
    lines = [colored(title, Colors.YELLOW, Colors.BRIGHT) if use_color else title]
    lines.extend(f"\t{diagnostic}" for diagnostic in graph.diagnostics)
    return "\n".join(lines)


def format_graphviz(graph: SourceGraph) -> str:
    """Render the include edges as a Graphviz digraph."""
    lines = [f"digraph {GRAPHVIZ_GRAPH_NAME} {{"]
    lines.extend(f'\t"{parent}" -> "{child}";' for parent, child in graph.edges())
    lines.append("}")
    return "\n".join(lines)


def to_dict(graph: SourceGraph) -> Dict[str, Any]:
    return {
        "root": graph.root,
        "include_paths": list(graph.include_paths),
        "headers": list(graph.headers),
        "sources": list(graph.sources),
        "system_includes": list(graph.system_includes),
        "missing": list(graph.missing_includes()),
        "diagnostics": [
            {"kind": d.kind.value, "file": d.file_path, "line": d.line_number, "message": d.message} for d in graph.diagnostics
        ],
    }


def format_json(graph: SourceGraph) -> str:
    return json.dumps(to_dict(graph), indent=2)


def to_networkx(graph: SourceGraph) -> "nx.DiGraph[str]":
    """Convert the include graph to a NetworkX DiGraph.

    Every relative node becomes a graph node even when it has no edges; system
    includes appear only through the edges that reference them.

    Node attributes:
        - label: File basename (or the include spelling for system includes)
        - kind: "source" or "header"
        - exists: False for missing include targets
        - system: True for unresolved angle-bracket includes
    """
    G: "nx.DiGraph[str]" = nx.DiGraph()

    for path, node in graph.nodes.items():
        G.add_node(path, label=os.path.basename(path), kind=node.kind.value, exists=node.exists, system=False)

    for parent, child in graph.edges():
        if not G.has_node(child):
            G.add_node(child, label=child, kind=NodeKind.HEADER.value, exists=True, system=True)
        G.add_edge(parent, child)

    return G


def export_graph(graph: SourceGraph, filename: str) -> None:
    """Export the include graph to a file; the extension picks the format.

    Supports: GraphML (.graphml), DOT (.dot), GEXF (.gexf), JSON node-link (.json)

    Args:
        graph: Built graph
        filename: Output filename

    Raises:
        ArgumentError: If the extension is not a supported graph format
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ArgumentError(f"Unsupported graph format '{ext}', expected one of {', '.join(SUPPORTED_GRAPH_FORMATS)}")

    G = to_networkx(graph)

    if ext == ".graphml":
        nx.write_graphml(G, filename)
    elif ext == ".dot":
        nx.drawing.nx_pydot.write_dot(G, filename)
    elif ext == ".gexf":
        nx.write_gexf(G, filename)
    elif ext == ".json":
        data = json_graph.node_link_data(G)
        with open(filename, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    logger.info("Exported include graph to %s (%d nodes, %d edges)", filename, G.number_of_nodes(), G.number_of_edges())
