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

"""Script rendering and temporary file management."""

import logging
import re
import tempfile
from collections.abc import Iterator
from pathlib import Path

from cartage_remote import errors
from cartage_remote.substitutions import SubstitutionContext

logger = logging.getLogger(__name__)

# Either an escaped percent sign, or a %{name} placeholder.
_PLACEHOLDER_RE = re.compile(r"%(?:(%)|\{([^{}]*)\})")


def render(
    template: str, context: SubstitutionContext, *, script_name: str = "script"
) -> str:
    """Replace ``%{name}`` placeholders with substitution parameter values.

    Substitution is done in a single pass, and ``%%`` is replaced with a
    single ``%``. Other uses of ``%`` are kept unchanged.

    :param template: The script template.
    :param context: The substitution parameters.
    :param script_name: The name of the script, used in error messages.

    :return: The rendered script.

    :raise ScriptRenderError: If the template refers to an unknown parameter.
    """
    unknown = [
        match.group(2)
        for match in _PLACEHOLDER_RE.finditer(template)
        if match.group(2) is not None and match.group(2) not in context
    ]
    if unknown:
        raise errors.ScriptRenderError(script_name=script_name, names=unknown)

    def _substitute(match: re.Match) -> str:
        if match.group(1):
            return "%"
        return context[match.group(2)]

    return _PLACEHOLDER_RE.sub(_substitute, template)


class TemporaryFiles:
    """Track temporary files and remove them when no longer needed.

    Files are created closed, and are deleted by :meth:`cleanup` or when
    leaving the context manager.
    """

    def __init__(self) -> None:
        self._paths: list[Path] = []

    def __enter__(self) -> "TemporaryFiles":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def create(self, basename: str, content: str) -> Path:
        """Write content to a new temporary file.

        :param basename: The prefix of the file name.
        :param content: The file content.

        :return: The path to the new file.
        """
        with tempfile.NamedTemporaryFile(
            "w", prefix=f"{basename}.", delete=False
        ) as tmp:
            path = Path(tmp.name)
            self._paths.append(path)
            tmp.write(content)

        logger.debug("created temporary file %s", path)
        return path

    def create_script(
        self, basename: str, template: str, context: SubstitutionContext
    ) -> Path:
        """Render a script template to a new executable temporary file.

        The file is only accessible by its owner.

        :param basename: The script name, used as the prefix of the file name.
        :param template: The script template.
        :param context: The substitution parameters.

        :return: The path to the new script.
        """
        content = render(template, context, script_name=basename)
        path = self.create(basename, content)
        path.chmod(0o700)
        return path

    def cleanup(self) -> None:
        """Delete all tracked files."""
        for path in self._paths:
            logger.debug("remove temporary file %s", path)
            try:
                path.unlink(missing_ok=True)
            except OSError as err:
                logger.warning("Cannot remove temporary file %s: %s", path, err)

        self._paths.clear()
