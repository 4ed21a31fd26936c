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


def test_remote_build_error_brief():
    err = errors.RemoteBuildError(brief="A brief description.")
    assert str(err) == "A brief description."
    assert (
        repr(err)
        == "RemoteBuildError(brief='A brief description.', details=None, resolution=None)"
    )
    assert err.brief == "A brief description."
    assert err.details is None
    assert err.resolution is None


def test_remote_build_error_full():
    err = errors.RemoteBuildError(
        brief="Brief", details="Details", resolution="Resolution"
    )
    assert str(err) == "Brief\nDetails\nResolution"
    assert err.brief == "Brief"
    assert err.details == "Details"
    assert err.resolution == "Resolution"


def test_configuration_error():
    err = errors.ConfigurationError("bummer")
    assert err.message == "bummer"
    assert err.brief == "bummer"
    assert err.details is None
    assert err.resolution is None
    assert str(err) == "bummer"


def test_configuration_error_from_validation_error():
    error_list = [
        {"loc": ("hosts", "default"), "msg": "field required", "type": "missing"},
        {"loc": ("bogus",), "msg": "extra fields", "type": "extra_forbidden"},
        {"loc": ("port",), "msg": "Input should be a valid string", "type": "x"},
        {"loc": (), "msg": "Value error, bad combination", "type": "value_error"},
        {"loc": ("build",), "msg": "", "type": "x"},
    ]
    err = errors.ConfigurationError.from_validation_error(
        section="remote", error_list=error_list  # type: ignore[arg-type]
    )
    assert err.brief == "Invalid remote configuration."
    assert err.details == (
        "- field 'hosts.default' is required\n"
        "- extra field 'bogus' not permitted\n"
        "- Input should be a valid string in field 'port'\n"
        "- Value error, bad combination"
    )
    assert err.resolution == (
        "Review the remote configuration and make sure it's correct."
    )


def test_invalid_stage_transition():
    err = errors.InvalidStageTransition(event="complete", stage="new")
    assert err.event == "complete"
    assert err.stage == "new"
    assert err.brief == "Event 'complete' is not valid in stage 'new'."


def test_script_render_error():
    err = errors.ScriptRenderError(script_name="build", names=["zz", "aa", "zz"])
    assert err.script_name == "build"
    assert err.names == ["aa", "zz"]
    assert err.brief == (
        "Failed to render the build script: unknown substitution "
        "parameters 'aa' and 'zz'."
    )
    assert err.resolution == (
        "Use only the documented '%{name}' substitution parameters."
    )


def test_script_render_error_many_names():
    err = errors.ScriptRenderError(script_name="prebuild", names=["c", "a", "b"])
    assert err.brief == (
        "Failed to render the prebuild script: unknown substitution "
        "parameters 'a', 'b' and 'c'."
    )


def test_stage_configuration_error():
    cause = errors.ConfigurationError(
        "No default host configured.", details="hosts: {}", resolution="Add a host."
    )
    err = errors.StageConfigurationError(stage="local_config", cause=cause)
    assert isinstance(err, errors.ConfigurationError)
    assert err.stage == "local_config"
    assert err.cause is cause
    assert err.message == (
        "Remote error in stage local_config: No default host configured."
    )
    assert err.details == "hosts: {}"
    assert err.resolution == "Add a host."


def test_local_script_error():
    err = errors.LocalScriptError(script_name="prebuild", exit_code=7)
    assert err.script_name == "prebuild"
    assert err.exit_code == 7
    assert err.brief == "The prebuild script exited with status 7."
    assert err.resolution == "Review the prebuild script and make sure it's correct."


def test_transport_error():
    err = errors.TransportError("invalid port 'x'")
    assert err.message == "invalid port 'x'"
    assert err.brief == "Failed to configure the remote transport: invalid port 'x'."
    assert err.resolution == "Check the host address, port and keys."


def test_remote_command_error():
    err = errors.RemoteCommandError(
        stage="remote_clone", command="git clone foo bar\n", status=128
    )
    assert err.stage == "remote_clone"
    assert err.command == "git clone foo bar\n"
    assert err.status == 128
    assert str(err) == (
        "Remote error in stage remote_clone:\n"
        "  SSH command failed with status (128):\n"
        "    git clone foo bar"
    )


def test_stage_error():
    cause = ValueError("boom")
    err = errors.StageError(stage="prebuild", cause=cause)
    assert err.stage == "prebuild"
    assert err.cause is cause
    assert str(err) == "Remote error in stage prebuild: boom"


@pytest.mark.parametrize(
    "err",
    [
        errors.ConfigurationError("x"),
        errors.LocalScriptError(script_name="x", exit_code=1),
        errors.RemoteCommandError(stage="x", command="x", status=1),
        errors.StageError(stage="x", cause="x"),
    ],
)
def test_errors_are_remote_build_errors(err):
    assert isinstance(err, errors.RemoteBuildError)
