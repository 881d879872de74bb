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
"""Index of headers reachable through declared include directories.

Each declared directory is walked recursively and every header below it is
registered under its "includable name": the directory's alias prefix joined
with the header's path relative to the directory. This lets an include such as
``#include <core/log.h>`` resolve to ``/abs/inc/core/log.h`` when ``/abs/inc``
was declared, regardless of where the including file lives.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .constants import ALIAS_SEPARATOR, DEFAULT_HEADER_SUFFIXES, ArgumentError, IncludeDirectoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncludeDirectory:
    """A declared include search directory.

    Attributes:
        path: Directory to index
        alias: Prefix prepended to every includable name found below path (may be empty)
    """

    path: str
    alias: str = ""


IncludeDirectoryLike = Union[IncludeDirectory, Tuple[str, str]]


def parse_include_directory_spec(spec: str) -> IncludeDirectory:
    """Split a ``directory#alias`` command-line value.

    The alias is everything after the last separator, so directories that
    contain the separator themselves still work as long as an alias marker
    is appended. A value without any separator has an empty alias.

    Args:
        spec: Value such as "third_party/fmt/include#fmt" or "include#"

    Returns:
        IncludeDirectory with path and alias split apart

    Raises:
        ArgumentError: If the directory part is empty
    """
    directory, separator, alias = spec.rpartition(ALIAS_SEPARATOR)
    if not separator:
        directory, alias = spec, ""

    if not directory:
        raise ArgumentError(f"Include directory specification has no directory: '{spec}'")

    return IncludeDirectory(path=directory, alias=alias)


def make_include_name(alias: str, relative_path: str) -> str:
    """Build the includable name for a header below an aliased directory."""
    return f"{alias}/{relative_path}" if alias else relative_path


def _raise_walk_error(error: OSError) -> None:
    raise error


class IncludeDirectoryIndex:
    """Read-only lookup table from includable name to absolute header path."""

    def __init__(self, entries: Optional[Dict[str, str]] = None, directories: Sequence[str] = ()):
        self._entries: Dict[str, str] = dict(entries or {})
        self._directories: Tuple[str, ...] = tuple(directories)

    @classmethod
    def build(cls, directories: Iterable[IncludeDirectoryLike], header_suffixes: Sequence[str] = DEFAULT_HEADER_SUFFIXES) -> "IncludeDirectoryIndex":
        """Walk every declared directory and index the headers below it.

        Directories are processed in the given order; when two of them produce
        the same includable name the later one wins.

        Args:
            directories: IncludeDirectory values or (path, alias) pairs
            header_suffixes: File name suffixes that identify headers

        Returns:
            Populated index

        Raises:
            IncludeDirectoryError: If a directory does not exist or cannot be read
        """
        entries: Dict[str, str] = {}
        absolute_directories: List[str] = []
        suffixes = tuple(header_suffixes)

        for directory in directories:
            if not isinstance(directory, IncludeDirectory):
                directory = IncludeDirectory(*directory)

            dir_path = os.path.abspath(directory.path)
            if not os.path.isdir(dir_path):
                raise IncludeDirectoryError(f"Include directory not found: {directory.path}")

            absolute_directories.append(dir_path)
            count = 0

            try:
                for root, dirs, files in os.walk(dir_path, onerror=_raise_walk_error):
                    dirs.sort()
                    for file_name in sorted(files):
                        if not file_name.endswith(suffixes):
                            continue

                        full_path = os.path.join(root, file_name)
                        # regular files only, symlinks are skipped
                        if os.path.islink(full_path) or not os.path.isfile(full_path):
                            continue

                        relative_path = os.path.relpath(full_path, dir_path).replace(os.sep, "/")
                        name = make_include_name(directory.alias, relative_path)

                        previous = entries.get(name)
                        if previous is not None and previous != full_path:
                            logger.debug("Include name '%s' now maps to %s (was %s)", name, full_path, previous)

                        entries[name] = full_path
                        count += 1
            except OSError as e:
                raise IncludeDirectoryError(f"Cannot read include directory {directory.path}: {e}") from e

            logger.info("Indexed %d headers in %s", count, dir_path)

        return cls(entries, absolute_directories)

    @property
    def directories(self) -> Tuple[str, ...]:
        """Absolute paths of the declared directories, in declaration order."""
        return self._directories

    def lookup(self, name: str) -> Optional[str]:
        return self._entries.get(name)

    def items(self) -> List[Tuple[str, str]]:
        """All (includable name, absolute path) pairs sorted by name."""
        return sorted(self._entries.items())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __repr__(self) -> str:
        return f"IncludeDirectoryIndex(headers={len(self._entries)}, directories={len(self._directories)})"
