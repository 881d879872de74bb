#!/usr/bin/env python3
"""Unit tests for include_index module."""

import os
from typing import Any

import pytest

from sourcegraph.constants import ArgumentError, IncludeDirectoryError
from sourcegraph.include_index import IncludeDirectory, IncludeDirectoryIndex, make_include_name, parse_include_directory_spec


class TestParseIncludeDirectorySpec:
    """Test splitting of dir#alias command-line values."""

    def test_directory_with_alias(self) -> None:
        assert parse_include_directory_spec("third_party/fmt/include#fmt") == IncludeDirectory("third_party/fmt/include", "fmt")

    def test_directory_with_empty_alias(self) -> None:
        assert parse_include_directory_spec("include#") == IncludeDirectory("include", "")

    def test_directory_without_separator(self) -> None:
        """A plain directory gets an empty alias."""
        assert parse_include_directory_spec("include") == IncludeDirectory("include", "")

    def test_last_separator_wins(self) -> None:
        assert parse_include_directory_spec("odd#dir#alias") == IncludeDirectory("odd#dir", "alias")

    def test_missing_directory_rejected(self) -> None:
        with pytest.raises(ArgumentError):
            parse_include_directory_spec("#alias")


class TestMakeIncludeName:
    """Test includable name construction."""

    def test_no_separator_for_empty_alias(self) -> None:
        assert make_include_name("", "core/log.h") == "core/log.h"

    def test_alias_joined_with_slash(self) -> None:
        assert make_include_name("fmt", "core.h") == "fmt/core.h"


class TestIncludeDirectoryIndexBuild:
    """Test walking declared include directories."""

    def test_indexes_headers_recursively(self, source_tree: Any) -> None:
        root = source_tree({"inc/a.h": "", "inc/sub/b.h": "", "inc/sub/deeper/c.h": ""})
        index = IncludeDirectoryIndex.build([IncludeDirectory(os.path.join(root, "inc"))])

        assert len(index) == 3
        assert index.lookup("a.h") == os.path.join(root, "inc", "a.h")
        assert index.lookup("sub/b.h") == os.path.join(root, "inc", "sub", "b.h")
        assert index.lookup("sub/deeper/c.h") == os.path.join(root, "inc", "sub", "deeper", "c.h")

    def test_non_headers_ignored(self, source_tree: Any) -> None:
        root = source_tree({"inc/a.h": "", "inc/a.cpp": "", "inc/notes.txt": "", "inc/b.hpp": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "inc"), "")])

        assert list(index) == ["a.h"]

    def test_directories_are_not_indexed(self, source_tree: Any) -> None:
        """A directory whose name ends in .h is not a header."""
        root = source_tree({"inc/weird.h/real.h": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "inc"), "")])

        assert "weird.h" not in index
        assert "weird.h/real.h" in index

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinked_headers_are_not_indexed(self, source_tree: Any) -> None:
        root = source_tree({"inc/a.h": "", "real/x.h": ""})
        os.symlink(os.path.join(root, "real", "x.h"), os.path.join(root, "inc", "link.h"))

        index = IncludeDirectoryIndex.build([(os.path.join(root, "inc"), "")])

        assert "link.h" not in index
        assert list(index) == ["a.h"]

    def test_alias_prefix(self, source_tree: Any) -> None:
        root = source_tree({"third_party/fmt/include/core.h": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "third_party", "fmt", "include"), "fmt")])

        assert index.lookup("fmt/core.h") == os.path.join(root, "third_party", "fmt", "include", "core.h")
        assert index.lookup("core.h") is None

    def test_last_directory_wins_on_collision(self, source_tree: Any) -> None:
        root = source_tree({"first/common.h": "", "second/common.h": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "first"), ""), (os.path.join(root, "second"), "")])

        assert index.lookup("common.h") == os.path.join(root, "second", "common.h")

    def test_relative_directory_resolved_to_absolute(self, source_tree: Any, monkeypatch: Any) -> None:
        root = source_tree({"inc/a.h": ""})
        monkeypatch.chdir(root)

        index = IncludeDirectoryIndex.build([("inc", "")])

        assert index.lookup("a.h") == os.path.join(root, "inc", "a.h")
        assert index.directories == (os.path.join(root, "inc"),)

    def test_custom_header_suffixes(self, source_tree: Any) -> None:
        root = source_tree({"inc/a.h": "", "inc/b.hpp": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "inc"), "")], header_suffixes=(".h", ".hpp"))

        assert list(index) == ["a.h", "b.hpp"]

    def test_empty_directory_list(self) -> None:
        index = IncludeDirectoryIndex.build([])

        assert len(index) == 0
        assert index.directories == ()

    def test_missing_directory_is_fatal(self, temp_dir: str) -> None:
        with pytest.raises(IncludeDirectoryError):
            IncludeDirectoryIndex.build([(os.path.join(temp_dir, "does_not_exist"), "")])

    def test_file_instead_of_directory_is_fatal(self, source_tree: Any) -> None:
        root = source_tree({"inc.h": ""})
        with pytest.raises(IncludeDirectoryError):
            IncludeDirectoryIndex.build([(os.path.join(root, "inc.h"), "")])

    def test_items_sorted_by_name(self, source_tree: Any) -> None:
        root = source_tree({"inc/z.h": "", "inc/a.h": "", "inc/m/b.h": ""})
        index = IncludeDirectoryIndex.build([(os.path.join(root, "inc"), "")])

        assert [name for name, _ in index.items()] == ["a.h", "m/b.h", "z.h"]
