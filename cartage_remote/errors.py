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

"""Remote build errors."""

import dataclasses
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


@dataclasses.dataclass(repr=True)
class RemoteBuildError(Exception):
    """Unexpected error.

    :param brief: Brief description of error.
    :param details: Detailed information.
    :param resolution: Recommendation, if any.
    """

    brief: str
    details: str | None = None
    resolution: str | None = None

    def __str__(self) -> str:
        components = [self.brief]

        if self.details:
            components.append(self.details)

        if self.resolution:
            components.append(self.resolution)

        return "\n".join(components)


class ConfigurationError(RemoteBuildError):
    """The remote build configuration is invalid or ambiguous.

    :param message: The error message.
    """

    def __init__(
        self, message: str, *, details: str | None = None, resolution: str | None = None
    ):
        self.message = message
        super().__init__(brief=message, details=details, resolution=resolution)

    @classmethod
    def from_validation_error(
        cls, *, section: str, error_list: Iterable["ErrorDetails"]
    ) -> "ConfigurationError":
        """Create a ConfigurationError from a pydantic error list.

        :param section: The configuration section being processed.
        :param error_list: A list of dictionaries containing pydantic error definitions.
        """
        formatted_errors: list[str] = []

        for error in error_list:
            loc = error.get("loc")
            msg = error.get("msg")

            if not msg or not isinstance(loc, tuple):
                continue

            if not loc:
                formatted_errors.append(f"- {msg}")
                continue

            field = ".".join(str(part) for part in loc)
            if error.get("type") == "missing":
                formatted_errors.append(f"- field {field!r} is required")
            elif error.get("type") == "extra_forbidden":
                formatted_errors.append(f"- extra field {field!r} not permitted")
            else:
                formatted_errors.append(f"- {msg} in field {field!r}")

        return cls(
            f"Invalid {section} configuration.",
            details="\n".join(formatted_errors),
            resolution=f"Review the {section} configuration and make sure it's correct.",
        )


class InvalidStageTransition(RemoteBuildError):
    """An event was fired from a stage that does not accept it.

    :param event: The name of the event.
    :param stage: The name of the current stage.
    """

    def __init__(self, *, event: str, stage: str):
        self.event = event
        self.stage = stage
        brief = f"Event {event!r} is not valid in stage {stage!r}."

        super().__init__(brief=brief)


class ScriptRenderError(RemoteBuildError):
    """A script template refers to unknown substitution parameters.

    :param script_name: The name of the script being rendered.
    :param names: The unknown parameter names.
    """

    def __init__(self, *, script_name: str, names: Iterable[str]):
        self.script_name = script_name
        self.names = sorted(set(names))
        brief = (
            f"Failed to render the {script_name} script: unknown substitution "
            f"parameters {_join_names(self.names)}."
        )
        resolution = "Use only the documented '%{name}' substitution parameters."

        super().__init__(brief=brief, resolution=resolution)


class LocalScriptError(RemoteBuildError):
    """A script run on the local machine exited with a non-zero status.

    :param script_name: The name of the script.
    :param exit_code: The script exit status.
    """

    def __init__(self, *, script_name: str, exit_code: int):
        self.script_name = script_name
        self.exit_code = exit_code
        brief = f"The {script_name} script exited with status {exit_code}."
        resolution = f"Review the {script_name} script and make sure it's correct."

        super().__init__(brief=brief, resolution=resolution)


class TransportError(RemoteBuildError):
    """The SSH transport could not be configured.

    :param message: The error message.
    """

    def __init__(self, message: str):
        self.message = message
        brief = f"Failed to configure the remote transport: {message}."
        resolution = "Check the host address, port and keys."

        super().__init__(brief=brief, resolution=resolution)


class RemoteCommandError(RemoteBuildError):
    """A command run on the remote host exited with a non-zero status.

    This error is already formatted for display and is never wrapped with
    stage information by the build manager.

    :param stage: The name of the stage running the command.
    :param command: The failing command.
    :param status: The command exit status.
    """

    def __init__(self, *, stage: str, command: str, status: int):
        self.stage = stage
        self.command = command
        self.status = status
        brief = f"Remote error in stage {stage}:"
        details = (
            f"  SSH command failed with status ({status}):\n    {command.strip()}"
        )

        super().__init__(brief=brief, details=details)


class StageError(RemoteBuildError):
    """A build stage failed.

    :param stage: The name of the stage where the error happened.
    :param cause: The original exception.
    """

    def __init__(self, *, stage: str, cause: Any):
        self.stage = stage
        self.cause = cause
        brief = f"Remote error in stage {stage}: {cause}"

        super().__init__(brief=brief)


class StageConfigurationError(ConfigurationError):
    """A build stage failed because of invalid configuration.

    :param stage: The name of the stage where the error happened.
    :param cause: The original configuration error.
    """

    def __init__(self, *, stage: str, cause: ConfigurationError):
        self.stage = stage
        self.cause = cause

        super().__init__(
            f"Remote error in stage {stage}: {cause.message}",
            details=cause.details,
            resolution=cause.resolution,
        )


def _join_names(names: list[str]) -> str:
    """Quote names and join them as ``'a', 'b' and 'c'``."""
    quoted = [repr(name) for name in names]
    if len(quoted) < 2:
        return "".join(quoted)

    return f"{', '.join(quoted[:-1])} and {quoted[-1]}"
