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

"""Definitions and helpers to handle remote build stages."""

import enum
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType

from cartage_remote import errors

logger = logging.getLogger(__name__)


@enum.unique
class Stage(enum.Enum):
    """The stages of a remote build, in order.

    In the ``LOCAL_CONFIG`` stage the build host, paths and scripts are
    resolved. The ``SSH_CONFIG`` stage prepares the connection to the build
    host, and the ``PREBUILD`` stage runs the prebuild script locally. The
    repository is cloned on the build host in the ``REMOTE_CLONE`` stage and
    the build script is run in the ``REMOTE_BUILD`` stage. The remote build
    directory is removed in the ``CLEANUP`` stage.
    """

    NEW = "new"
    LOCAL_CONFIG = "local_config"
    SSH_CONFIG = "ssh_config"
    PREBUILD = "prebuild"
    REMOTE_CLONE = "remote_clone"
    REMOTE_BUILD = "remote_build"
    CLEANUP = "cleanup"
    FINISHED = "finished"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.{self.name}"

    def __str__(self) -> str:
        return self.value


@enum.unique
class Event(enum.Enum):
    """The events moving a remote build from one stage to the next."""

    LOCAL_SETUP = "local_setup"
    SSH_SETUP = "ssh_setup"
    RUN_PREBUILD = "run_prebuild"
    CLONE_REMOTE = "clone_remote"
    BUILD_REMOTE = "build_remote"
    CLEAN_REMOTE = "clean_remote"
    COMPLETE = "complete"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.{self.name}"

    def __str__(self) -> str:
        return self.value


# Each event is valid from exactly one stage.
TRANSITIONS: Mapping[Event, tuple[Stage, Stage]] = MappingProxyType(
    {
        Event.LOCAL_SETUP: (Stage.NEW, Stage.LOCAL_CONFIG),
        Event.SSH_SETUP: (Stage.LOCAL_CONFIG, Stage.SSH_CONFIG),
        Event.RUN_PREBUILD: (Stage.SSH_CONFIG, Stage.PREBUILD),
        Event.CLONE_REMOTE: (Stage.PREBUILD, Stage.REMOTE_CLONE),
        Event.BUILD_REMOTE: (Stage.REMOTE_CLONE, Stage.REMOTE_BUILD),
        Event.CLEAN_REMOTE: (Stage.REMOTE_BUILD, Stage.CLEANUP),
        Event.COMPLETE: (Stage.CLEANUP, Stage.FINISHED),
    }
)

Handler = Callable[[], None]


class StageMachine:
    """Move a build through its stages and run the stage handlers.

    When an event is triggered, the machine enters the next stage and then
    runs the handler registered for the event, if any, followed by the
    handler registered for the new stage, if any. If a handler fails, the
    machine stays in the new stage.

    :param event_handlers: The functions to run when an event is triggered.
    :param stage_handlers: The functions to run when a stage is entered.
    """

    def __init__(
        self,
        *,
        event_handlers: Mapping[Event, Handler] | None = None,
        stage_handlers: Mapping[Stage, Handler] | None = None,
    ):
        self._stage = Stage.NEW
        self._event_handlers = MappingProxyType(dict(event_handlers or {}))
        self._stage_handlers = MappingProxyType(dict(stage_handlers or {}))

    @property
    def stage(self) -> Stage:
        """Return the current stage."""
        return self._stage

    def trigger(self, event: Event) -> Stage:
        """Move to the stage following the given event and run its handlers.

        :param event: The event to trigger.

        :return: The new stage.

        :raise InvalidStageTransition: If the event is not valid in the
            current stage.
        """
        source, target = TRANSITIONS[event]
        if self._stage != source:
            raise errors.InvalidStageTransition(
                event=event.value, stage=self._stage.value
            )

        logger.debug("event %s: %s -> %s", event, source, target)
        self._stage = target

        event_handler = self._event_handlers.get(event)
        if event_handler:
            event_handler()

        stage_handler = self._stage_handlers.get(target)
        if stage_handler:
            stage_handler()

        return target
