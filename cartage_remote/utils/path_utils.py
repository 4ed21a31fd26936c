# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2026 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Utility functions for paths."""

import glob
from collections.abc import Iterable
from pathlib import Path


def home_relative(path: str) -> str:
    """Make a ``~/``-prefixed remote path relative to the remote home directory.

    File transfers resolve relative paths against the login directory and do
    not expand ``~``.

    :param path: The remote path.

    :return: The path without its leading ``~/``, or the unchanged path.
    """
    if path.startswith("~/"):
        return path[2:]
    return path


def expand_patterns(patterns: Iterable[str]) -> list[str]:
    """Expand glob patterns against the local filesystem.

    User home references are expanded before matching. Results are
    concatenated in pattern order, each pattern's matches sorted, and
    duplicates removed keeping the first occurrence.

    :param patterns: The glob patterns to expand.

    :return: The list of matching paths.
    """
    matches: list[str] = []
    for pattern in patterns:
        matches.extend(sorted(glob.glob(str(Path(pattern).expanduser()))))

    return list(dict.fromkeys(matches))
