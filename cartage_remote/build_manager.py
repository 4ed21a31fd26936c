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

"""The remote build manager.

A remote build connects to a build host over SSH and builds a package
there, using path-based isolation so that builds of many projects and
revisions can share the same build host. The steps of a remote build are:

1. Resolve the build host and scripts, and save the build configuration
   to a temporary file that will be copied to the build host.
2. Prepare the SSH connection with the configured keys.
3. Render the prebuild script and run it locally.
4. Create the isolation directory on the build host, copy the build
   configuration there, clone the repository and check out the revision
   to build.
5. Render the build script, copy it to the build host and run it from the
   checkout directory.
6. Remove the isolation directory from the build host.
7. Render the postbuild script, if any, and run it locally. This happens
   whether the build succeeds or not.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml

from cartage_remote import errors
from cartage_remote.config import (
    NotifyCallback,
    RemotePlan,
    check_config,
    resolve_plan,
    resolve_plugin_config,
)
from cartage_remote.executor import RemoteExecutor, run_script
from cartage_remote.infos import ProjectInfo
from cartage_remote.paths import RemotePaths, build_paths
from cartage_remote.scripts import TemporaryFiles
from cartage_remote.stages import Event, Stage, StageMachine
from cartage_remote.substitutions import SubstitutionContext, build_context
from cartage_remote.transport import Stream

logger = logging.getLogger(__name__)

# The events of a complete build, in order.
BUILD_EVENTS = (
    Event.LOCAL_SETUP,
    Event.SSH_SETUP,
    Event.RUN_PREBUILD,
    Event.CLONE_REMOTE,
    Event.BUILD_REMOTE,
    Event.CLEAN_REMOTE,
    Event.COMPLETE,
)


class RemoteBuildManager:
    """Build a project on a remote host.

    :param remote_config: The remote build configuration data.
    :param project: Information about the project to build.
    :param display: The function used to show progress messages. Messages
        are logged if not specified.
    :param stdout: The stream for script and command output.
    :param stderr: The stream for script and command error output.

    :raise ConfigurationError: If the remote configuration is invalid.
    """

    def __init__(
        self,
        remote_config: Mapping[str, Any] | None,
        *,
        project: ProjectInfo,
        display: Callable[[str], None] | None = None,
        stdout: Stream = None,
        stderr: Stream = None,
    ):
        self._config = resolve_plugin_config(remote_config)
        self._project = project
        self._display = display or logger.info
        self._stdout = stdout
        self._stderr = stderr

        self._tmpfiles = TemporaryFiles()
        self._plan: RemotePlan | None = None
        self._paths: RemotePaths | None = None
        self._context: SubstitutionContext | None = None
        self._config_file: Path | None = None
        self._remote: RemoteExecutor | None = None

        self._machine = StageMachine(
            event_handlers={Event.COMPLETE: self._complete},
            stage_handlers={
                Stage.LOCAL_CONFIG: self._local_config,
                Stage.SSH_CONFIG: self._ssh_config,
                Stage.PREBUILD: self._prebuild,
                Stage.REMOTE_CLONE: self._remote_clone,
                Stage.REMOTE_BUILD: self._remote_build,
                Stage.CLEANUP: self._cleanup,
            },
        )

    @property
    def stage(self) -> Stage:
        """Return the current build stage."""
        return self._machine.stage

    @property
    def plan(self) -> RemotePlan | None:
        """Return the build plan, once resolved."""
        return self._plan

    @property
    def paths(self) -> RemotePaths | None:
        """Return the remote build locations, once computed."""
        return self._paths

    @property
    def context(self) -> SubstitutionContext | None:
        """Return the script substitution parameters, once computed."""
        return self._context

    @property
    def temporary_files(self) -> TemporaryFiles:
        """Return the temporary files created by this build."""
        return self._tmpfiles

    def build(self) -> None:
        """Build on the remote host.

        The postbuild script runs and temporary files are removed whether
        the build succeeds or not.

        :raise RemoteCommandError: If a remote command fails.
        :raise StageConfigurationError: If the configuration is invalid for
            the build stage.
        :raise StageError: If any other error happens during a build stage.
        """
        error: Exception | None = None

        try:
            for event in BUILD_EVENTS:
                self._machine.trigger(event)
        except errors.RemoteCommandError as err:
            error = err
            raise
        except errors.ConfigurationError as err:
            error = errors.StageConfigurationError(stage=self.stage.value, cause=err)
            raise error from err
        except Exception as err:
            error = errors.StageError(stage=self.stage.value, cause=err)
            raise error from err
        finally:
            self._finish(error)

    def check_config(
        self, *, require_host: bool = False, notify: NotifyCallback | None = None
    ) -> bool:
        """Verify the host configuration.

        :param require_host: Whether the selected host must be configured.
        :param notify: The function called with a message for each invalid
            host. Defaults to logging a warning.

        :return: True if the verification succeeds.

        :raise ValueError: If there are no hosts.
        :raise RuntimeError: If a host is required and not present.
        """
        return check_config(self._config, require_host=require_host, notify=notify)

    def _local_config(self) -> None:
        self._plan = resolve_plan(self._config)
        logger.debug("building on host %r (%s)", self._plan.host_name, self._plan.host)

        self._display("Pre-build configuration...")
        self._paths = build_paths(
            self._plan.build_root, self._project.name, self._project.timestamp
        )

        snapshot = self._project.config_snapshot(
            root_path=str(self._paths.build_path),
            dependency_cache_path=str(self._paths.dependency_cache),
        )
        self._config_file = self._tmpfiles.create(
            "config.yml", yaml.safe_dump(snapshot, default_flow_style=False)
        )

        self._context = build_context(self._paths, self._project, self._plan.host)

    def _ssh_config(self) -> None:
        plan = self._get_plan()
        plan.host.configure_transport(plan.transport_options)
        plan.host.connect()
        self._remote = RemoteExecutor(
            plan.host.shell,
            plan.host.copier,
            stage=lambda: self.stage.value,
            stdout=self._stdout,
            stderr=self._stderr,
        )

    def _prebuild(self) -> None:
        plan = self._get_plan()
        if not plan.prebuild_script:
            logger.debug("no prebuild script")
            return

        self._display("Running prebuild script...")
        script = self._tmpfiles.create_script(
            "prebuild", plan.prebuild_script, self._get_context()
        )
        run_script(
            script, script_name="prebuild", stdout=self._stdout, stderr=self._stderr
        )

    def _remote_clone(self) -> None:
        paths = self._get_paths()
        remote = self._get_remote()
        repo_url = self._project.repo_url
        release_hashref = self._project.release_hashref

        self._display(f"Checking out {repo_url} at {release_hashref} remotely...")

        remote.run(f"mkdir -p {paths.isolation_path}")
        remote.upload(self._get_config_file(), str(paths.config_file))
        remote.run(f"git clone {repo_url} {paths.build_path}")
        remote.run(f"cd {paths.build_path} && git checkout {release_hashref}")

    def _remote_build(self) -> None:
        plan = self._get_plan()
        paths = self._get_paths()
        remote = self._get_remote()

        self._display("Running build script...")
        script = self._tmpfiles.create_script(
            "build", plan.build_script, self._get_context()
        )
        remote.upload(script, str(paths.build_script))
        remote.run(f"cd {paths.build_path} && {paths.build_script}")

    def _cleanup(self) -> None:
        paths = self._get_paths()

        self._display("Cleaning up after the build...")
        self._get_remote().run(f"rm -rf {paths.isolation_path}")

    def _complete(self) -> None:
        logger.debug("remote build of %s finished", self._project.name)

    def _finish(self, error: Exception | None) -> None:
        """Run the postbuild script and remove temporary files."""
        try:
            self._run_postbuild(error)
        finally:
            self._tmpfiles.cleanup()

    def _run_postbuild(self, error: Exception | None) -> None:
        if self._plan:
            postbuild_script = self._plan.postbuild_script
        else:
            postbuild_script = self._config.postbuild

        if not postbuild_script:
            return

        self._display("Running postbuild script...")
        error_text = str(error) if error else ""

        try:
            script = self._tmpfiles.create_script(
                "postbuild", postbuild_script, self._context or {}
            )
            status = run_script(
                script,
                self.stage.value,
                error_text,
                script_name="postbuild",
                check=False,
                stdout=self._stdout,
                stderr=self._stderr,
            )
        except (errors.RemoteBuildError, OSError) as err:
            logger.warning("Postbuild script failed: %s", err)
            return

        if status != 0:
            logger.warning("Postbuild script exited with status %d.", status)

    def _get_plan(self) -> RemotePlan:
        if self._plan is None:
            raise RuntimeError("build plan is not resolved")
        return self._plan

    def _get_paths(self) -> RemotePaths:
        if self._paths is None:
            raise RuntimeError("remote paths are not computed")
        return self._paths

    def _get_context(self) -> SubstitutionContext:
        if self._context is None:
            raise RuntimeError("substitution parameters are not computed")
        return self._context

    def _get_config_file(self) -> Path:
        if self._config_file is None:
            raise RuntimeError("build configuration file is not created")
        return self._config_file

    def _get_remote(self) -> RemoteExecutor:
        if self._remote is None:
            raise RuntimeError("remote transport is not configured")
        return self._remote
