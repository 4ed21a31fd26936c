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

"""Definitions and helpers to handle remote build hosts."""

import getpass
import logging
import re
from collections.abc import Mapping
from typing import Any

from fabric import Connection
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from cartage_remote import errors, keys
from cartage_remote.transport import (
    RemoteCopy,
    RemoteShell,
    TransportOptions,
    establish_connection,
    open_connection,
)

logger = logging.getLogger(__name__)

# A compact host description, ``[user@]address[:port]``.
HOST_RE = re.compile(
    r"\A(?:(?P<user>[^@]+)@)?(?P<address>[^@:]+)(?::(?P<port>[^:]+))?\Z"
)


class HostSpec(BaseModel):
    """The host specification data."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    user: str | None = None
    """The user to connect to the remote host as. Defaults to the local user."""

    address: str | None = None
    """The address of the remote host. May also be given as ``host``."""

    port: str | None = None
    """The SSH port, if not the standard port 22."""

    forward_agent: bool = True
    """Whether the local SSH agent is forwarded to the remote host."""

    keys: str | list[str] | dict[str, str] | None = None
    """Glob patterns for private key files, or a mapping of labels to key data."""

    build: str | None = None
    """The build script to use for this host."""

    prebuild: str | None = None
    """The prebuild script to use for this host."""

    postbuild: str | None = None
    """The postbuild script to use for this host."""

    @model_validator(mode="before")
    @classmethod
    def validate_address_alias(cls, values: Any) -> Any:  # noqa: ANN401
        """Accept ``host`` as an alternative name for ``address``."""
        if not isinstance(values, dict) or "host" not in values:
            return values

        values = dict(values)
        host = values.pop("host")
        if not values.get("address"):
            values["address"] = host
        return values

    @classmethod
    def unmarshal(cls, data: dict[str, Any]) -> "HostSpec":
        """Create and populate a new ``HostSpec`` object from dictionary data.

        :param data: The dictionary data to unmarshal.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        """
        if not isinstance(data, dict):
            raise TypeError("host data is not a dictionary")

        return HostSpec(**data)

    def marshal(self) -> dict[str, Any]:
        """Create a dictionary containing the host specification data."""
        return self.model_dump(exclude_none=True)


HostEntry = str | HostSpec


def host_address(entry: HostEntry | None) -> str | None:
    """Obtain the address of a host entry without validating it.

    :param entry: The structured or compact host entry.

    :return: The host address, or None if no address can be determined.
    """
    if isinstance(entry, HostSpec):
        return entry.address or None

    if isinstance(entry, str):
        match = HOST_RE.match(entry)
        if match:
            return match.group("address")

    return None


class Host:
    """The remote machine a build runs on.

    :param spec: A host specification, a dictionary containing host
        specification data, or a compact ``[user@]address[:port]`` string.

    :raise ConfigurationError: If no host address can be determined.
    """

    def __init__(self, spec: HostSpec | Mapping[str, Any] | str):
        if isinstance(spec, Mapping):
            try:
                spec = HostSpec.unmarshal(dict(spec))
            except ValidationError as err:
                raise errors.ConfigurationError.from_validation_error(
                    section="host", error_list=err.errors()
                ) from err

        user = address = port = None
        key_material = keys.KeyMaterial()
        self._forward_agent = True
        self._build = self._prebuild = self._postbuild = None

        if isinstance(spec, HostSpec):
            user = spec.user
            address = spec.address
            port = spec.port
            key_material = keys.resolve_keys(spec.keys)
            self._forward_agent = spec.forward_agent
            self._build = spec.build
            self._prebuild = spec.prebuild
            self._postbuild = spec.postbuild
        elif isinstance(spec, str):
            match = HOST_RE.match(spec)
            if match:
                user, address, port = match.group("user", "address", "port")

        if not address:
            raise errors.ConfigurationError(
                "Invalid remote host, no address specified."
            )

        self._user: str = user or getpass.getuser()
        self._address: str = address
        self._port: str | None = port or None
        self._key_material = key_material

        self._connection: Connection | None = None
        self._shell: RemoteShell | None = None
        self._copier: RemoteCopy | None = None

    def __repr__(self) -> str:
        return f"Host({str(self)!r})"

    def __str__(self) -> str:
        display = self._address
        if self._user:
            display = f"{self._user}@{display}"
        if self._port:
            display = f"{display}:{self._port}"
        return display

    @property
    def user(self) -> str:
        """Return the remote user."""
        return self._user

    @property
    def address(self) -> str:
        """Return the remote host address."""
        return self._address

    @property
    def port(self) -> str | None:
        """Return the SSH port, if set."""
        return self._port

    @property
    def forward_agent(self) -> bool:
        """Return whether the local SSH agent is forwarded."""
        return self._forward_agent

    @property
    def keys(self) -> tuple[str, ...] | None:
        """Return the private key files configured for this host."""
        return self._key_material.keys

    @property
    def key_data(self) -> tuple[str, ...] | None:
        """Return the inline private keys configured for this host."""
        return self._key_material.key_data

    @property
    def build(self) -> str | None:
        """Return the host build script override."""
        return self._build

    @property
    def prebuild(self) -> str | None:
        """Return the host prebuild script override."""
        return self._prebuild

    @property
    def postbuild(self) -> str | None:
        """Return the host postbuild script override."""
        return self._postbuild

    @property
    def shell(self) -> RemoteShell:
        """Return the command execution handle.

        :raise RuntimeError: If the transport was not configured.
        """
        if self._shell is None:
            raise RuntimeError(f"transport for host {self} is not configured")
        return self._shell

    @property
    def copier(self) -> RemoteCopy:
        """Return the file transfer handle.

        :raise RuntimeError: If the transport was not configured.
        """
        if self._copier is None:
            raise RuntimeError(f"transport for host {self} is not configured")
        return self._copier

    def to_dict(self) -> dict[str, str]:
        """Return the connection information of this host as a dictionary."""
        data = {"user": self._user, "address": self._address, "port": self._port}
        return {key: value for key, value in data.items() if value}

    def configure_transport(self, shared_options: TransportOptions) -> TransportOptions:
        """Prepare the command execution and file transfer handles.

        Key material defined for this host replaces the shared keys and key
        data entirely. The host port and agent forwarding setting are always
        applied.

        :param shared_options: The options shared by all hosts.

        :return: The merged connection options.
        """
        options_keys = shared_options.keys
        options_key_data = shared_options.key_data

        if self.key_data:
            options_keys, options_key_data = None, self.key_data
        elif self.keys:
            options_keys, options_key_data = self.keys, None

        options = TransportOptions(
            port=self._port or shared_options.port,
            forward_agent=self._forward_agent,
            keys=options_keys or None,
            key_data=options_key_data or None,
        )
        logger.debug(
            "configure transport for %s (port=%s, forward_agent=%s, keys=%s)",
            self,
            options.port,
            options.forward_agent,
            options.keys,
        )

        self._connection = open_connection(self._address, self._user, options)
        self._shell = RemoteShell(self._connection)
        self._copier = RemoteCopy(self._connection)

        return options

    def connect(self) -> None:
        """Open the connection prepared by :meth:`configure_transport`.

        :raise RuntimeError: If the transport was not configured.
        :raise TransportError: If the connection cannot be established.
        """
        if self._connection is None:
            raise RuntimeError(f"transport for host {self} is not configured")
        establish_connection(self._connection)
