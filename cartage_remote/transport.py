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

"""SSH transport handles for remote command execution and file transfer."""

import dataclasses
import io
import logging
from pathlib import Path
from typing import Any, TextIO

import paramiko
from fabric import Connection

from cartage_remote import errors
from cartage_remote.utils import path_utils

logger = logging.getLogger(__name__)

Stream = TextIO | None

_KEY_CLASSES: tuple[type[paramiko.PKey], ...] = (
    paramiko.RSAKey,
    paramiko.ECDSAKey,
    paramiko.Ed25519Key,
)


@dataclasses.dataclass(frozen=True)
class TransportOptions:
    """Options used to open an SSH connection.

    :param port: The SSH port, if not the default.
    :param forward_agent: Whether to forward the local SSH agent.
    :param keys: Paths to private key files.
    :param key_data: Inline private key contents.
    """

    port: str | None = None
    forward_agent: bool | None = None
    keys: tuple[str, ...] | None = None
    key_data: tuple[str, ...] | None = dataclasses.field(default=None, repr=False)

    def connect_kwargs(self) -> dict[str, Any]:
        """Obtain the keyword arguments for the underlying SSH client."""
        kwargs: dict[str, Any] = {}

        if self.keys:
            kwargs["key_filename"] = list(self.keys)

        if self.key_data:
            if len(self.key_data) > 1:
                logger.debug(
                    "%d inline keys configured, using the first one",
                    len(self.key_data),
                )
            kwargs["pkey"] = load_private_key(self.key_data[0])

        return kwargs

    def port_number(self) -> int | None:
        """Obtain the SSH port as an integer."""
        if not self.port:
            return None

        try:
            return int(self.port)
        except ValueError as err:
            raise errors.TransportError(f"invalid port {self.port!r}") from err


@dataclasses.dataclass(frozen=True)
class CommandResult:
    """The outcome of a remote command."""

    command: str
    status: int


def load_private_key(data: str) -> paramiko.PKey:
    """Load an ASCII-armored private key.

    :param data: The private key contents.

    :return: The loaded key.

    :raise TransportError: If the key type is not supported.
    """
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(data))
        except (paramiko.SSHException, ValueError):
            continue

    raise errors.TransportError("unsupported or invalid private key data")


def open_connection(address: str, user: str, options: TransportOptions) -> Connection:
    """Create a connection to a remote host.

    The connection is opened on first use.

    :param address: The remote host address.
    :param user: The remote user.
    :param options: The connection options.
    """
    return Connection(
        host=address,
        user=user,
        port=options.port_number(),
        forward_agent=options.forward_agent,
        connect_kwargs=options.connect_kwargs(),
    )


def establish_connection(connection: Connection) -> None:
    """Open a connection to a remote host.

    :param connection: The connection to open.

    :raise TransportError: If the host cannot be reached or rejects the
        connection.
    """
    logger.debug("connect to %s", connection.host)

    try:
        connection.open()
    except (paramiko.SSHException, OSError) as err:
        raise errors.TransportError(
            f"cannot connect to {connection.host}: {err}"
        ) from err


class RemoteShell:
    """Run shell commands on a remote host.

    :param connection: The connection to the remote host.
    """

    def __init__(self, connection: Connection):
        self._connection = connection

    def execute(
        self, command: str, *, stdout: Stream = None, stderr: Stream = None
    ) -> CommandResult:
        """Run a command and wait for it to finish.

        Output is forwarded to ``stdout`` and ``stderr`` as it arrives. A
        non-zero exit status is reported in the result, not raised.

        :param command: The command to run.
        :param stdout: The stream for the command output. Defaults to
            ``sys.stdout``.
        :param stderr: The stream for the command error output. Defaults to
            ``sys.stderr``.
        """
        logger.debug("run on %s: %s", self._connection.host, command)
        result = self._connection.run(
            command,
            warn=True,
            in_stream=False,
            out_stream=stdout,
            err_stream=stderr,
        )
        return CommandResult(command=command, status=result.exited)


class RemoteCopy:
    """Copy files to a remote host.

    :param connection: The connection to the remote host.
    """

    def __init__(self, connection: Connection):
        self._connection = connection

    def upload(self, local_path: Path | str, remote_path: str) -> None:
        """Copy a local file to the remote host.

        :param local_path: The file to copy.
        :param remote_path: The destination path. Paths starting with
            ``~/`` are relative to the remote user's home directory.
        """
        destination = path_utils.home_relative(str(remote_path))
        logger.debug("upload %s to %s:%s", local_path, self._connection.host, destination)
        self._connection.put(str(local_path), remote=destination)
