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

import os
import types
from pathlib import Path

import pytest
from cartage_remote.infos import ProjectInfo


@pytest.fixture
def project_main_module() -> types.ModuleType:
    """Fixture that returns the project's principal package (imported)."""
    try:
        import cartage_remote  # noqa: PLC0415

        main_module = cartage_remote
    except ImportError:
        pytest.fail(
            "Failed to import the project's main module: check if it needs updating",
        )
    return main_module


@pytest.fixture
def new_dir(monkeypatch, tmpdir):
    """Change to a new temporary directory."""
    monkeypatch.chdir(tmpdir)
    return tmpdir


@pytest.fixture
def new_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def temp_home(tmp_path, mocker) -> Path:
    """Use a temporary home directory, so that no real SSH keys are found."""
    home = tmp_path / "home"
    (home / ".ssh").mkdir(parents=True)
    mocker.patch.dict(os.environ, {"HOME": str(home)})
    return home


@pytest.fixture(autouse=True)
def fake_user(mocker) -> str:
    """Use a fixed local user name."""
    mocker.patch("getpass.getuser", return_value="builder")
    return "builder"


@pytest.fixture
def temp_files_dir(tmp_path, mocker) -> Path:
    """Create temporary files in a known location."""
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    mocker.patch("tempfile.tempdir", new=str(tmp_dir))
    return tmp_dir


@pytest.fixture
def mock_connection(mocker):
    """Replace the SSH connection class with a mock.

    Remote commands succeed by default.
    """
    connection_class = mocker.patch("cartage_remote.transport.Connection")
    connection = connection_class.return_value
    connection.host = "build.example.com"
    connection.run.return_value = types.SimpleNamespace(exited=0)
    return connection_class


@pytest.fixture
def project_info() -> ProjectInfo:
    return ProjectInfo.unmarshal(
        {
            "name": "demo",
            "repo_url": "git@example.com:demo/demo.git",
            "release_hashref": "abc123",
            "timestamp": "20260102030405",
            "plugins": {"remote": {"server": "build.example.com"}},
        }
    )
