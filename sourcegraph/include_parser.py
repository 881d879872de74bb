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
"""Naive #include directive scanner.

Lines are matched textually: a line is an include when its first
whitespace-delimited token is exactly ``#include``. No macro expansion,
conditional compilation or comment handling is attempted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .constants import INCLUDE_DIRECTIVE, QUOTE_CHARACTER

logger = logging.getLogger(__name__)

MalformedIncludeCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class IncludeDirective:
    """One include statement found in a file.

    Attributes:
        line_number: 1-based line of the directive
        token: Include spec as written, delimiters included (e.g. '"a.h"' or '<vector>')
        name: Include text with the delimiters stripped
        is_quoted: True when the token is delimited by quotes on both ends
    """

    line_number: int
    token: str
    name: str
    is_quoted: bool


def is_quoted_token(token: str) -> bool:
    """Check whether both ends of an include token are the quote character.

    Anything else, angle brackets or mismatched delimiters, is treated as a
    system-style include.
    """
    return len(token) >= 2 and token[0] == QUOTE_CHARACTER and token[-1] == QUOTE_CHARACTER


def scan_include_directives(content: str, file_path: str, on_malformed: Optional[MalformedIncludeCallback] = None) -> Iterator[IncludeDirective]:
    """Yield the include directives of a file in line order.

    A directive without a usable include token is logged and skipped; the
    remaining lines are still scanned.

    Args:
        content: Full file content
        file_path: Path used in diagnostics
        on_malformed: Optional callback receiving (line_number, line) for malformed directives

    Yields:
        IncludeDirective for every well-formed include line
    """
    for line_number, line in enumerate(content.splitlines(), start=1):
        if not line.startswith(INCLUDE_DIRECTIVE):
            continue

        tokens = line.split()
        if tokens[0] != INCLUDE_DIRECTIVE:
            continue

        token = tokens[1] if len(tokens) > 1 else ""
        name = token[1:-1]
        if not name:
            logger.warning("Malformed #include on line %d of %s: '%s'", line_number, file_path, line)
            if on_malformed is not None:
                on_malformed(line_number, line)
            continue

        yield IncludeDirective(line_number=line_number, token=token, name=name, is_quoted=is_quoted_token(token))
