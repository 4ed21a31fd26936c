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

"""Definitions for the remote build directory layout.

Builds are isolated by project name and build timestamp, so that builds of
different projects, or of different revisions of the same project, can share
a remote build root::

    <build_root>/cartage/<name>/<timestamp>/<name>
         |          |       |        |         |
     build root     |       |        |         |
                 cartage    |        |         |
                  path   project     |         |
                          path   isolation     |
                                   path      build
                                              path

Two builds with the same project name and timestamp share the same
isolation path.
"""

import dataclasses
from pathlib import PurePosixPath


@dataclasses.dataclass(frozen=True)
class RemotePaths:
    """The remote locations used by a build.

    :ivar build_root: The remote base directory for all builds.
    :ivar cartage_path: The directory containing all projects.
    :ivar project_path: The directory containing all builds of the project.
    :ivar isolation_path: The directory owned by this build.
    :ivar build_path: The repository checkout.
    :ivar remote_bundle: The directory where build dependencies are installed.
    :ivar dependency_cache: The dependency cache shared by builds of the project.
    :ivar config_file: The build configuration file.
    :ivar build_script: The build script.
    """

    build_root: PurePosixPath
    cartage_path: PurePosixPath
    project_path: PurePosixPath
    isolation_path: PurePosixPath
    build_path: PurePosixPath
    remote_bundle: PurePosixPath
    dependency_cache: PurePosixPath
    config_file: PurePosixPath
    build_script: PurePosixPath

    def marshal(self) -> dict[str, str]:
        """Create a dictionary mapping location names to path strings."""
        return {
            field.name: str(getattr(self, field.name))
            for field in dataclasses.fields(self)
        }


def build_paths(build_root: str, name: str, timestamp: str) -> RemotePaths:
    """Compute the remote directory layout for a build.

    :param build_root: The remote base directory for all builds.
    :param name: The project name.
    :param timestamp: The build timestamp.

    :return: The remote build locations.
    """
    root = PurePosixPath(build_root)
    cartage_path = root / "cartage"
    project_path = cartage_path / name
    isolation_path = project_path / timestamp

    return RemotePaths(
        build_root=root,
        cartage_path=cartage_path,
        project_path=project_path,
        isolation_path=isolation_path,
        build_path=isolation_path / name,
        remote_bundle=isolation_path / "deps",
        dependency_cache=project_path,
        config_file=isolation_path / "cartage.yml",
        build_script=isolation_path / "cartage-build-remote",
    )
