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

"""Resolution of the remote build configuration into a build plan."""

import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from typing_extensions import Self

from cartage_remote import errors, keys
from cartage_remote.hosts import Host, HostEntry, HostSpec, host_address
from cartage_remote.transport import TransportOptions

logger = logging.getLogger(__name__)

DEFAULT_HOST_NAME = "default"

DEFAULT_BUILD_ROOT = "~"

DEFAULT_PREBUILD_SCRIPT = """\
#!/bin/bash

ssh-keyscan -H %{remote_address} >> ~/.ssh/known_hosts
"""

DEFAULT_BUILD_SCRIPT = """\
#!/bin/bash

set -e

if [ -f Gemfile ]; then
  bundle install --path %{remote_bundle}
  bundle exec cartage --config-file %{config_file} --target %{project_path} pack
else
  cartage --config-file %{config_file} --target %{project_path} pack
fi
"""

NotifyCallback = Callable[[str], None]


class RemoteConfig(BaseModel):
    """The remote build configuration data."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    hosts: dict[str, HostEntry | None] | None = None
    """The build hosts, by name."""

    host: str | None = None
    """The name of the host to build on. Defaults to ``default``."""

    server: HostEntry | None = None
    """A single build host, used as the ``default`` host."""

    keys: str | list[str] | dict[str, str] | None = None
    """Glob patterns for private key files, or a mapping of labels to key data."""

    key_data: list[str] | dict[str, str] | None = None
    """Inline private key data."""

    build: str | None = None
    """The build script run on the remote host."""

    prebuild: str | None = None
    """The script run locally before the remote build."""

    postbuild: str | None = None
    """The script run locally after the build, successful or not."""

    build_root: str | None = None
    """The remote directory under which builds are isolated."""

    @model_validator(mode="after")
    def validate_key_options(self) -> Self:
        """Check that keys are not specified in two different ways."""
        if self.keys is not None and self.key_data is not None:
            raise ValueError("'keys' and 'key_data' cannot be used together")
        return self

    @classmethod
    def unmarshal(cls, data: dict[str, Any]) -> "RemoteConfig":
        """Create and populate a new ``RemoteConfig`` object from dictionary data.

        :param data: The dictionary data to unmarshal.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        """
        if not isinstance(data, dict):
            raise TypeError("remote configuration is not a dictionary")

        return RemoteConfig(**data)

    def marshal(self) -> dict[str, Any]:
        """Create a dictionary containing the remote configuration data."""
        return self.model_dump(exclude_none=True)


@dataclasses.dataclass(frozen=True)
class RemotePlan:
    """The fully resolved configuration for one remote build.

    :param host_name: The name of the selected host.
    :param host: The selected host.
    :param build_root: The remote build root.
    :param build_script: The build script template.
    :param prebuild_script: The prebuild script template.
    :param postbuild_script: The postbuild script template, if any.
    :param transport_options: The connection options shared by all hosts.
    """

    host_name: str
    host: Host
    build_root: str
    build_script: str
    prebuild_script: str
    postbuild_script: str | None
    transport_options: TransportOptions


def resolve_plugin_config(data: Mapping[str, Any] | None) -> RemoteConfig:
    """Validate the remote configuration and normalize legacy settings.

    A legacy ``server`` entry is converted into the ``default`` host.

    :param data: The remote configuration data.

    :return: The normalized configuration.

    :raise ConfigurationError: If the configuration is invalid.
    """
    if data is None:
        raise errors.ConfigurationError("Remote build has no configuration.")

    try:
        config = RemoteConfig.unmarshal(dict(data))
    except ValidationError as err:
        raise errors.ConfigurationError.from_validation_error(
            section="remote", error_list=err.errors()
        ) from err

    if config.server is None:
        return config

    hosts = dict(config.hosts or {})
    if hosts.get(DEFAULT_HOST_NAME) is not None:
        raise errors.ConfigurationError(
            "Cannot configure both an implicit and explicit default host.",
            resolution="Remove either 'server' or 'hosts.default'.",
        )

    server = Host(config.server)
    hosts[DEFAULT_HOST_NAME] = HostSpec.unmarshal(server.to_dict())
    logger.debug("legacy server %s converted to the default host", server)

    return config.model_copy(
        update={
            "hosts": hosts,
            "host": config.host or DEFAULT_HOST_NAME,
            "server": None,
        }
    )


def shared_transport_options(config: RemoteConfig) -> TransportOptions:
    """Obtain the connection options shared by all hosts.

    If no keys are configured, local key files matching the default
    pattern are used.

    :param config: The remote configuration.
    """
    if config.key_data is not None:
        material = keys.resolve_key_data(config.key_data)
    else:
        material = keys.resolve_keys(
            config.keys, default_pattern=keys.DEFAULT_KEY_PATTERN
        )

    return TransportOptions(keys=material.keys, key_data=material.key_data)


def select_host(config: RemoteConfig) -> tuple[str, Host]:
    """Select the host to build on.

    :param config: The remote configuration.

    :return: The name of the selected host and the host.

    :raise ConfigurationError: If the host is missing or has no address.
    """
    name = config.host or DEFAULT_HOST_NAME
    entry = (config.hosts or {}).get(name)

    if entry is None:
        if config.host is None:
            raise errors.ConfigurationError(
                "No default host configured.",
                resolution="Add a 'default' entry to 'hosts' or select a host.",
            )
        raise errors.ConfigurationError(f"Host {name!r} is not configured.")

    _verify_host(name, entry, notify=_fail)

    return name, Host(entry)


def resolve_plan(config: RemoteConfig) -> RemotePlan:
    """Select the build host and resolve the scripts to run.

    Scripts defined for the host take precedence over scripts defined in
    the remote configuration, which take precedence over the built-in
    defaults. There is no default postbuild script.

    :param config: The remote configuration.

    :return: The build plan.

    :raise ConfigurationError: If the host is missing or invalid, or if
        there is no build script.
    """
    name, host = select_host(config)

    build_script = _first_set(host.build, config.build, DEFAULT_BUILD_SCRIPT)
    if not build_script:
        raise errors.ConfigurationError(f"No build script to run on remote {host}.")

    return RemotePlan(
        host_name=name,
        host=host,
        build_root=config.build_root or DEFAULT_BUILD_ROOT,
        build_script=build_script,
        prebuild_script=_first_set(
            host.prebuild, config.prebuild, DEFAULT_PREBUILD_SCRIPT
        ),
        postbuild_script=_first_set(host.postbuild, config.postbuild),
        transport_options=shared_transport_options(config),
    )


def check_config(
    config: RemoteConfig,
    *,
    require_host: bool = False,
    notify: NotifyCallback | None = None,
) -> bool:
    """Verify the host configuration.

    Hosts without an address are reported through ``notify`` and do not
    cause the verification to fail.

    :param config: The remote configuration.
    :param require_host: Whether the selected host must be configured.
    :param notify: The function called with a message for each invalid host.
        Defaults to logging a warning.

    :return: True if the verification succeeds.

    :raise ValueError: If there are no hosts.
    :raise RuntimeError: If a host is required and not present.
    """
    if notify is None:
        notify = logger.warning

    if not config.hosts:
        raise ValueError("No hosts present")

    for name, entry in config.hosts.items():
        _verify_host(name, entry, notify=notify)

    if require_host:
        name = config.host or DEFAULT_HOST_NAME
        if config.hosts.get(name) is None:
            raise RuntimeError(f"No host {name} present")

    return True


def _verify_host(name: str, entry: HostEntry | None, *, notify: NotifyCallback) -> None:
    if not host_address(entry):
        notify(f"Host {name} invalid: No host address present")


def _fail(message: str) -> None:
    raise errors.ConfigurationError(message)


def _first_set(*values: str | None) -> str | None:
    """Return the first value that is not None, even if empty."""
    for value in values:
        if value is not None:
            return value
    return None
