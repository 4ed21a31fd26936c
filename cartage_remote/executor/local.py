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

"""Run scripts on the local machine."""

import logging
import subprocess
from pathlib import Path

from cartage_remote import errors
from cartage_remote.transport import Stream

logger = logging.getLogger(__name__)


def run_script(
    script: Path,
    *args: str,
    script_name: str,
    check: bool = True,
    stdout: Stream = None,
    stderr: Stream = None,
) -> int:
    """Execute a local script.

    :param script: The path to the executable script.
    :param args: The script arguments.
    :param script_name: The name of the script, used in error messages.
    :param check: Whether a non-zero exit status is an error.
    :param stdout: The stream for the script output.
    :param stderr: The stream for the script error output.

    :return: The script exit status.

    :raise LocalScriptError: If ``check`` is set and the script fails.
    """
    logger.debug("run %s script %s %s", script_name, script, args)

    try:
        proc = subprocess.run(
            [str(script), *args],
            check=check,
            stdout=stdout,
            stderr=stderr,
        )
    except subprocess.CalledProcessError as process_error:
        raise errors.LocalScriptError(
            script_name=script_name, exit_code=process_error.returncode
        ) from process_error

    return proc.returncode
