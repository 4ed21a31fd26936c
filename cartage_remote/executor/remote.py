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

"""Run commands and transfer files on the build host."""

import logging
from collections.abc import Callable
from pathlib import Path

from cartage_remote import errors
from cartage_remote.transport import CommandResult, RemoteCopy, RemoteShell, Stream

logger = logging.getLogger(__name__)


class RemoteExecutor:
    """Execute commands on the build host on behalf of a build stage.

    :param shell: The command execution handle.
    :param copier: The file transfer handle.
    :param stage: A function returning the name of the current stage, used
        to report command failures.
    :param stdout: The stream for command output.
    :param stderr: The stream for command error output.
    """

    def __init__(
        self,
        shell: RemoteShell,
        copier: RemoteCopy,
        *,
        stage: Callable[[], str],
        stdout: Stream = None,
        stderr: Stream = None,
    ):
        self._shell = shell
        self._copier = copier
        self._stage = stage
        self._stdout = stdout
        self._stderr = stderr

    def run(self, *commands: str) -> list[CommandResult]:
        """Run commands in order, stopping at the first failure.

        :param commands: The shell commands to run.

        :return: The result of each command.

        :raise RemoteCommandError: If a command exits with a non-zero status.
        """
        results: list[CommandResult] = []

        for command in commands:
            result = self._shell.execute(
                command, stdout=self._stdout, stderr=self._stderr
            )
            results.append(result)

            if result.status != 0:
                logger.debug("command %r failed with status %d", command, result.status)
                raise errors.RemoteCommandError(
                    stage=self._stage(), command=result.command, status=result.status
                )

        return results

    def upload(self, local_path: Path | str, remote_path: str) -> None:
        """Copy a local file to the build host.

        :param local_path: The file to copy.
        :param remote_path: The destination path.
        """
        self._copier.upload(local_path, remote_path)
