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

import pytest
from cartage_remote import errors
from cartage_remote.stages import TRANSITIONS, Event, Stage, StageMachine


def test_stage_repr():
    assert f"{Stage.REMOTE_BUILD!r}" == "Stage.REMOTE_BUILD"
    assert f"{Event.CLONE_REMOTE!r}" == "Event.CLONE_REMOTE"


def test_stage_str():
    assert str(Stage.LOCAL_CONFIG) == "local_config"
    assert str(Event.SSH_SETUP) == "ssh_setup"


def test_transitions_are_linear():
    stages = [Stage.NEW]
    for event in Event:
        source, target = TRANSITIONS[event]
        assert source == stages[-1]
        stages.append(target)

    assert stages == list(Stage)


class TestStageMachine:
    """Stage transitions and handler dispatch."""

    def test_initial_stage(self):
        assert StageMachine().stage == Stage.NEW

    def test_trigger_without_handlers(self):
        machine = StageMachine()
        for event in Event:
            machine.trigger(event)
        assert machine.stage == Stage.FINISHED

    def test_trigger_returns_new_stage(self):
        machine = StageMachine()
        assert machine.trigger(Event.LOCAL_SETUP) == Stage.LOCAL_CONFIG

    def test_handler_order(self):
        calls = []
        machine = StageMachine(
            event_handlers={Event.LOCAL_SETUP: lambda: calls.append("event")},
            stage_handlers={Stage.LOCAL_CONFIG: lambda: calls.append("stage")},
        )

        machine.trigger(Event.LOCAL_SETUP)

        assert calls == ["event", "stage"]

    def test_stage_entered_before_handlers(self):
        seen = []
        machine = StageMachine(
            stage_handlers={Stage.LOCAL_CONFIG: lambda: seen.append(machine.stage)}
        )

        machine.trigger(Event.LOCAL_SETUP)

        assert seen == [Stage.LOCAL_CONFIG]

    def test_failing_handler_keeps_stage(self):
        def fail():
            raise RuntimeError("boom")

        machine = StageMachine(stage_handlers={Stage.LOCAL_CONFIG: fail})

        with pytest.raises(RuntimeError):
            machine.trigger(Event.LOCAL_SETUP)

        assert machine.stage == Stage.LOCAL_CONFIG

    def test_invalid_transition(self):
        machine = StageMachine()

        with pytest.raises(errors.InvalidStageTransition) as raised:
            machine.trigger(Event.COMPLETE)

        assert raised.value.event == "complete"
        assert raised.value.stage == "new"
        assert machine.stage == Stage.NEW

    def test_no_backward_transition(self):
        machine = StageMachine()
        machine.trigger(Event.LOCAL_SETUP)
        machine.trigger(Event.SSH_SETUP)

        with pytest.raises(errors.InvalidStageTransition):
            machine.trigger(Event.LOCAL_SETUP)

        assert machine.stage == Stage.SSH_CONFIG
