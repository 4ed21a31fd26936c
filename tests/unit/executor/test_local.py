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

import subprocess
from pathlib import Path

import pytest
from cartage_remote import errors
from cartage_remote.executor import run_script


@pytest.fixture
def script(new_path) -> Path:
    path = new_path / "hook"
    path.write_text("#!/bin/sh\necho \"$1:$2\" > args.txt\nexit ${EXIT_CODE:-0}\n")
    path.chmod(0o700)
    return path


def test_run_script(script, new_path):
    status = run_script(script, "remote_build", "", script_name="postbuild")

    assert status == 0
    assert (new_path / "args.txt").read_text() == "remote_build:\n"


def test_run_script_failure(script, monkeypatch):
    monkeypatch.setenv("EXIT_CODE", "3")

    with pytest.raises(errors.LocalScriptError) as raised:
        run_script(script, script_name="prebuild")

    assert raised.value.script_name == "prebuild"
    assert raised.value.exit_code == 3
    assert isinstance(raised.value.__cause__, subprocess.CalledProcessError)


def test_run_script_no_check(script, monkeypatch):
    monkeypatch.setenv("EXIT_CODE", "4")

    assert run_script(script, script_name="postbuild", check=False) == 4


def test_run_script_arguments(mocker):
    mock_run = mocker.patch(
        "subprocess.run", return_value=subprocess.CompletedProcess([], 0)
    )

    run_script(Path("/tmp/hook"), "a", "b", script_name="prebuild")

    mock_run.assert_called_once_with(
        ["/tmp/hook", "a", "b"], check=True, stdout=None, stderr=None
    )
