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

"""Substitution parameters available to build scripts."""

from collections.abc import Mapping
from types import MappingProxyType

from cartage_remote.hosts import Host
from cartage_remote.infos import ProjectInfo
from cartage_remote.paths import RemotePaths

SubstitutionContext = Mapping[str, str]

PARAMETER_NAMES = frozenset(
    {
        "repo_url",
        "name",
        "release_hashref",
        "timestamp",
        "remote_address",
        "remote_host",
        "remote_port",
        "remote_user",
        "build_root",
        "cartage_path",
        "project_path",
        "isolation_path",
        "build_path",
        "remote_bundle",
        "dependency_cache",
        "config_file",
        "build_script",
    }
)


def build_context(
    paths: RemotePaths, project: ProjectInfo, host: Host
) -> SubstitutionContext:
    """Create the script substitution parameters for a build.

    ``remote_host`` is the same as ``remote_address``, and ``remote_port``
    is empty if no port is configured.

    :param paths: The remote build locations.
    :param project: The project information.
    :param host: The build host.

    :return: A read-only mapping of parameter names to values.
    """
    values = paths.marshal()
    values.update(
        repo_url=project.repo_url,
        name=project.name,
        release_hashref=project.release_hashref,
        timestamp=project.timestamp,
        remote_address=host.address,
        remote_host=host.address,
        remote_port=host.port or "",
        remote_user=host.user,
    )

    return MappingProxyType(values)
