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

"""Project information used by remote builds."""

import datetime
import logging
from typing import Any

import pydantic

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def make_timestamp() -> str:
    """Create a build timestamp for the current time."""
    return datetime.datetime.now().strftime(TIMESTAMP_FORMAT)


class ProjectInfo(pydantic.BaseModel):
    """Project information provided by the application.

    :param name: The project name.
    :param repo_url: The URL of the repository to clone on the remote host.
    :param release_hashref: The revision to build.
    :param timestamp: The build timestamp.
    :param compression: The package compression type.
    :param disable_dependency_cache: Whether the dependency cache is disabled.
    :param config: The application build configuration.
    """

    model_config = pydantic.ConfigDict(
        extra="forbid",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    name: str
    repo_url: str
    release_hashref: str
    timestamp: str = pydantic.Field(default_factory=lambda: make_timestamp())
    compression: str = "bzip2"
    disable_dependency_cache: bool = False
    config: dict[str, Any] = pydantic.Field(default_factory=dict)

    @classmethod
    def unmarshal(cls, data: dict[str, Any]) -> "ProjectInfo":
        """Create a new ``ProjectInfo`` from application configuration data.

        Known project keys are extracted from the data, and the complete
        data is kept as the build configuration.

        :param data: The application configuration data.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        """
        if not isinstance(data, dict):
            raise TypeError("project data is not a dictionary")

        fields = {
            key: data[key]
            for key in cls.model_fields
            if key != "config" and data.get(key) is not None
        }
        return cls(**fields, config=data)

    def config_snapshot(
        self, *, root_path: str, dependency_cache_path: str
    ) -> dict[str, Any]:
        """Create the build configuration used on the remote host.

        The remote plugin configuration is not included.

        :param root_path: The remote checkout directory.
        :param dependency_cache_path: The remote dependency cache directory.

        :return: The configuration data.
        """
        snapshot = dict(self.config)

        plugins = snapshot.get("plugins")
        if isinstance(plugins, dict) and "remote" in plugins:
            snapshot["plugins"] = {
                key: value for key, value in plugins.items() if key != "remote"
            }

        snapshot.update(
            name=self.name,
            root_path=root_path,
            timestamp=self.timestamp,
            release_hashref=self.release_hashref,
            compression=self.compression,
            disable_dependency_cache=self.disable_dependency_cache,
            dependency_cache_path=dependency_cache_path,
        )
        logger.debug("configuration snapshot for %s: %s", self.name, snapshot)

        return snapshot
