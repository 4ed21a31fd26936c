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

"""SSH key material resolution.

Keys can be configured either as glob patterns matching private key files
on the local machine, or as a mapping of labels to inline private key data.
Both forms are resolved once into a :class:`KeyMaterial` object.
"""

import dataclasses
import logging
from collections.abc import Mapping, Sequence

from cartage_remote.utils import path_utils

logger = logging.getLogger(__name__)

# Key files searched for when no keys are configured.
DEFAULT_KEY_PATTERN = "~/.ssh/*id_[rd]sa"

KeySpec = str | Sequence[str] | Mapping[str, str] | None


@dataclasses.dataclass(frozen=True)
class KeyMaterial:
    """Resolved SSH key material.

    At most one of ``keys`` and ``key_data`` is set. Empty collections are
    normalized to ``None``.

    :param keys: Paths to local private key files.
    :param key_data: Inline private key contents.
    """

    keys: tuple[str, ...] | None = None
    key_data: tuple[str, ...] | None = dataclasses.field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.keys:
            object.__setattr__(self, "keys", None)
        if not self.key_data:
            object.__setattr__(self, "key_data", None)

        if self.keys and self.key_data:
            raise ValueError("key files and key data are mutually exclusive")

    @property
    def is_empty(self) -> bool:
        """Whether no key material is available."""
        return self.keys is None and self.key_data is None


def resolve_keys(spec: KeySpec, *, default_pattern: str | None = None) -> KeyMaterial:
    """Resolve a key specification into key material.

    :param spec: A mapping of labels to key data, or one or more glob
        patterns matching key files.
    :param default_pattern: The glob pattern to use if no specification
        is given.

    :return: The resolved key material.
    """
    if isinstance(spec, Mapping):
        return KeyMaterial(key_data=tuple(spec.values()))

    if spec is None:
        if default_pattern is None:
            return KeyMaterial()
        patterns = [default_pattern]
    elif isinstance(spec, str):
        patterns = [spec]
    else:
        patterns = list(spec)

    keys = path_utils.expand_patterns(patterns)
    logger.debug("keys matching %s: %s", patterns, keys)

    return KeyMaterial(keys=tuple(keys))


def resolve_key_data(spec: Sequence[str] | Mapping[str, str]) -> KeyMaterial:
    """Resolve inline key data given as a list or as a labeled mapping.

    :param spec: The key data.

    :return: The resolved key material.
    """
    if isinstance(spec, Mapping):
        return KeyMaterial(key_data=tuple(spec.values()))

    return KeyMaterial(key_data=tuple(spec))
