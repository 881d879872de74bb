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
"""Include graph construction for a single C/C++ translation unit.

Starting from a root source file, every ``#include`` is followed to a file on
disk (or recorded as an opaque system include), headers pull in their
companion implementation files (``foo.h`` -> ``foo.cpp``), and the result is
reduced to three sorted lists a build system can consume directly: the include
directories in use, the headers, and the sources.

Usage:
    graph = build_source_graph("src/main.cpp", [("include", "")])
    for header in graph.headers:
        print(header)
"""

import os
import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .constants import DEFAULT_COMPANION_SUFFIXES, DEFAULT_HEADER_SUFFIXES, GraphBuildError
from .include_index import IncludeDirectoryIndex, IncludeDirectoryLike
from .include_parser import IncludeDirective, scan_include_directives

logger = logging.getLogger(__name__)


class NodeKind(enum.Enum):
    """Role of a file in the graph: the root or an inferred implementation file, or a header."""

    SOURCE = "source"
    HEADER = "header"


class NodeStatus(enum.Enum):
    """Processing lifecycle of a node.

    NOT_YET_RESOLVED: created but never scheduled (system includes stay here)
    QUEUED: on the worklist, its file will be read exactly once
    RESOLVED: file read and children linked, terminal
    """

    NOT_YET_RESOLVED = "not_yet_resolved"
    QUEUED = "queued"
    RESOLVED = "resolved"


class DiagnosticKind(enum.Enum):
    MISSING_INCLUDE = "missing_include"
    MALFORMED_INCLUDE = "malformed_include"


@dataclass
class RelativeInclude:
    """Include backed by a concrete filesystem path."""

    resolved_path: str
    exists: bool = True


@dataclass(frozen=True)
class SystemInclude:
    """Angle-bracket include that no declared include directory provides."""

    name: str


Include = Union[RelativeInclude, SystemInclude]


@dataclass(eq=False)
class Node:
    """One vertex of the include graph.

    Attributes:
        kind: SOURCE for the root and inferred companion files, HEADER otherwise
        include: Where the node points to (RelativeInclude or SystemInclude)
        status: Processing lifecycle state
        parent: Node that first introduced this one (diagnostics only)
        children: Directly included nodes in discovery order, None until resolved
    """

    kind: NodeKind
    include: Include
    status: NodeStatus
    parent: Optional["Node"] = None
    children: Optional[List["Node"]] = None

    @property
    def path(self) -> str:
        """Resolved path for relative includes, the include spelling for system includes."""
        if isinstance(self.include, RelativeInclude):
            return self.include.resolved_path
        if isinstance(self.include, SystemInclude):
            return self.include.name
        raise TypeError(f"Unknown include type: {type(self.include).__name__}")

    @property
    def is_system(self) -> bool:
        return isinstance(self.include, SystemInclude)

    @property
    def exists(self) -> bool:
        """False only for relative includes whose file could not be found."""
        if isinstance(self.include, RelativeInclude):
            return self.include.exists
        return True

    def __repr__(self) -> str:
        return f"Node({self.kind.value}, {self.path!r}, {self.status.value})"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem met during construction."""

    kind: DiagnosticKind
    file_path: str
    line_number: Optional[int]
    message: str

    def __str__(self) -> str:
        location = f"{self.file_path}:{self.line_number}" if self.line_number is not None else self.file_path
        return f"{location}: {self.message}"


@dataclass(frozen=True)
class GraphOptions:
    """Configuration threaded into a graph build.

    Attributes:
        header_suffixes: Suffixes indexed as headers inside include directories
        companion_suffixes: Suffixes probed next to a header for its implementation file
        debug: Log every resolved edge and index entry at debug level
    """

    header_suffixes: Tuple[str, ...] = DEFAULT_HEADER_SUFFIXES
    companion_suffixes: Tuple[str, ...] = DEFAULT_COMPANION_SUFFIXES
    debug: bool = False


def _sort_descending(paths: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(paths), reverse=True))


class _GraphBuilder:
    """Worklist traversal that owns all nodes while a graph is being built."""

    def __init__(self, index: IncludeDirectoryIndex, options: GraphOptions):
        self.index = index
        self.options = options
        self.nodes: Dict[str, Node] = {}
        self.system_nodes: Dict[str, Node] = {}
        self.include_paths: Set[str] = set(index.directories)
        self.diagnostics: List[Diagnostic] = []
        self.queue: List[Node] = []

    def _debug(self, msg: str, *args: object) -> None:
        if self.options.debug:
            logger.debug(msg, *args)

    def _add_relative(self, kind: NodeKind, path: str, parent: Optional[Node]) -> Node:
        node = Node(kind=kind, include=RelativeInclude(resolved_path=path), status=NodeStatus.QUEUED, parent=parent)
        self.nodes[path] = node
        self.queue.append(node)
        return node

    def run(self, root_file_path: str) -> Node:
        root = self._add_relative(NodeKind.SOURCE, root_file_path, None)

        while self.queue:
            node = self.queue.pop()

            if node.status is NodeStatus.RESOLVED:
                continue
            if node.status is not NodeStatus.QUEUED:
                raise AssertionError(f"Only queued nodes may be processed, got {node!r}. This is a bug.")

            self._process(node)

        return root

    def _process(self, node: Node) -> None:
        include = node.include
        if not isinstance(include, RelativeInclude):
            raise AssertionError(f"System include {node.path!r} must never be queued. This is a bug.")

        file_path = include.resolved_path
        directory = os.path.dirname(file_path)
        self.include_paths.add(directory)

        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                if node.kind is NodeKind.HEADER:
                    self._add_companion_sources(node, file_path)
                contents = f.read()
        except FileNotFoundError:
            logger.warning("Cannot find relative include '%s'", file_path)
            include.exists = False
            node.status = NodeStatus.RESOLVED
            self.diagnostics.append(Diagnostic(DiagnosticKind.MISSING_INCLUDE, file_path, None, "include target not found"))
            return
        except OSError as e:
            raise GraphBuildError(f"Failed to read {file_path}: {e}") from e

        def on_malformed(line_number: int, line: str) -> None:
            self.diagnostics.append(Diagnostic(DiagnosticKind.MALFORMED_INCLUDE, file_path, line_number, f"malformed #include: '{line}'"))

        children: List[Node] = []
        for directive in scan_include_directives(contents, file_path, on_malformed):
            child = self._resolve(node, directory, directive)
            self._debug("%s -> %s", file_path, child.path)
            children.append(child)

        node.children = children
        node.status = NodeStatus.RESOLVED

    def _add_companion_sources(self, header: Node, header_path: str) -> None:
        stem = os.path.splitext(os.path.basename(header_path))[0]
        directory = os.path.dirname(header_path)

        for suffix in self.options.companion_suffixes:
            source_path = os.path.join(directory, stem + suffix)
            if not os.path.isfile(source_path):
                continue

            self._debug("Source found for %s: %s", header_path, source_path)
            if source_path not in self.nodes:
                self._add_relative(NodeKind.SOURCE, source_path, header)

    def _resolve(self, parent: Node, directory: str, directive: IncludeDirective) -> Node:
        candidate: Optional[str] = None
        if directive.is_quoted:
            candidate = os.path.abspath(os.path.join(directory, directive.name))
            known = self.nodes.get(candidate)
            if known is not None:
                return known

        indexed_path = self.index.lookup(directive.name)
        if indexed_path is not None:
            known = self.nodes.get(indexed_path)
            if known is not None:
                return known
            return self._add_relative(NodeKind.HEADER, indexed_path, parent)

        if candidate is not None:
            return self._add_relative(NodeKind.HEADER, candidate, parent)

        system_node = self.system_nodes.get(directive.name)
        if system_node is None:
            system_node = Node(kind=NodeKind.HEADER, include=SystemInclude(directive.name), status=NodeStatus.NOT_YET_RESOLVED, parent=parent)
            self.system_nodes[directive.name] = system_node
        return system_node


class SourceGraph:
    """Read-only include graph of one translation unit.

    Build it with SourceGraph.build() or build_source_graph(). All nodes are
    owned by the graph; nothing is mutated after construction.
    """

    def __init__(self, root: Node, nodes: Dict[str, Node], system_nodes: Dict[str, Node], include_paths: Iterable[str], diagnostics: Sequence[Diagnostic]):
        self._root = root
        self._nodes = nodes
        self._system_nodes = system_nodes
        self._include_paths = _sort_descending(include_paths)
        self._diagnostics = tuple(diagnostics)
        self._sources = _sort_descending(node.path for node in nodes.values() if node.kind is NodeKind.SOURCE)
        self._headers = _sort_descending(node.path for node in nodes.values() if node.kind is NodeKind.HEADER)

    @classmethod
    def build(
        cls, root_file_path: str, include_directories: Iterable[IncludeDirectoryLike] = (), options: Optional[GraphOptions] = None
    ) -> "SourceGraph":
        """Construct the include graph rooted at root_file_path.

        Args:
            root_file_path: Translation unit to start from
            include_directories: IncludeDirectory values or (path, alias) pairs
            options: Build configuration (defaults to GraphOptions())

        Returns:
            Fully built SourceGraph

        Raises:
            IncludeDirectoryError: If a declared include directory cannot be indexed
            GraphBuildError: On I/O errors other than a missing include target
        """
        if options is None:
            options = GraphOptions()

        index = IncludeDirectoryIndex.build(include_directories, options.header_suffixes)
        if options.debug:
            for name, path in index.items():
                logger.debug('#include "%s" => %s', name, path)

        builder = _GraphBuilder(index, options)
        root = builder.run(os.path.abspath(root_file_path))

        graph = cls(root, builder.nodes, builder.system_nodes, builder.include_paths, builder.diagnostics)
        logger.info(
            "Built include graph for %s: %d headers, %d sources, %d system includes, %d warnings",
            graph.root,
            len(graph.headers),
            len(graph.sources),
            len(builder.system_nodes),
            len(builder.diagnostics),
        )
        return graph

    @property
    def root(self) -> str:
        return self._root.path

    @property
    def root_node(self) -> Node:
        return self._root

    @property
    def include_paths(self) -> Tuple[str, ...]:
        """Include directories in use, descending order."""
        return self._include_paths

    @property
    def sources(self) -> Tuple[str, ...]:
        """Root plus inferred companion sources, descending order."""
        return self._sources

    @property
    def headers(self) -> Tuple[str, ...]:
        """Relative headers (found or missing), descending order."""
        return self._headers

    @property
    def nodes(self) -> Mapping[str, Node]:
        """Relative nodes keyed by resolved path."""
        return MappingProxyType(self._nodes)

    @property
    def system_includes(self) -> Tuple[str, ...]:
        """Spellings of unresolved angle-bracket includes, ascending order."""
        return tuple(sorted(self._system_nodes))

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return self._diagnostics

    def node(self, path: str) -> Optional[Node]:
        """Look up a relative node by path (made absolute first)."""
        return self._nodes.get(os.path.abspath(path))

    def missing_includes(self) -> Tuple[str, ...]:
        """Paths of relative nodes whose file does not exist, descending order."""
        return _sort_descending(path for path, node in self._nodes.items() if not node.exists)

    def edges(self) -> Iterator[Tuple[str, str]]:
        """Yield (parent_path, child_path) for every recorded include link.

        Parents are visited in ascending path order, children in the order
        they were included.
        """
        for path in sorted(self._nodes):
            children = self._nodes[path].children
            if children is None:
                continue
            for child in children:
                yield path, child.path

    def __repr__(self) -> str:
        return f"SourceGraph(root={self.root!r}, headers={len(self._headers)}, sources={len(self._sources)})"


def build_source_graph(
    root_file_path: str, include_directories: Iterable[IncludeDirectoryLike] = (), options: Optional[GraphOptions] = None
) -> SourceGraph:
    """Build the include graph of root_file_path. See SourceGraph.build()."""
    return SourceGraph.build(root_file_path, include_directories, options)
