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
import stat

import pytest
from cartage_remote import errors, scripts

_CONTEXT = {"name": "demo", "build_path": "~/cartage/demo/1/demo"}


class TestRender:
    """Placeholder substitution in script templates."""

    @pytest.mark.parametrize(
        ("template", "expected"),
        [
            ("", ""),
            ("no placeholders", "no placeholders"),
            ("cd %{build_path}", "cd ~/cartage/demo/1/demo"),
            ("%{name}-%{name}", "demo-demo"),
            ("date +%Y%m%d", "date +%Y%m%d"),
            ("echo 100%%", "echo 100%"),
            ("echo %%{name}", "echo %{name}"),
            ("echo %", "echo %"),
        ],
    )
    def test_render(self, template, expected):
        assert scripts.render(template, _CONTEXT) == expected

    def test_single_pass(self):
        context = {"name": "%{build_path}", "build_path": "x"}
        assert scripts.render("%{name}", context) == "%{build_path}"

    def test_unknown_parameters(self):
        with pytest.raises(errors.ScriptRenderError) as raised:
            scripts.render(
                "%{name} %{bogus} %{other} %{bogus}", _CONTEXT, script_name="build"
            )
        assert raised.value.script_name == "build"
        assert raised.value.names == ["bogus", "other"]

    def test_default_script_name(self):
        with pytest.raises(errors.ScriptRenderError) as raised:
            scripts.render("%{}", _CONTEXT)
        assert raised.value.script_name == "script"
        assert raised.value.names == [""]


class TestTemporaryFiles:
    """Temporary file creation and cleanup."""

    def test_create(self, temp_files_dir):
        tmpfiles = scripts.TemporaryFiles()

        path = tmpfiles.create("config.yml", "name: demo\n")

        assert path.parent == temp_files_dir
        assert path.name.startswith("config.yml.")
        assert path.read_text() == "name: demo\n"
        assert list(tmpfiles) == [path]
        assert len(tmpfiles) == 1

    def test_create_unique(self, temp_files_dir):
        tmpfiles = scripts.TemporaryFiles()

        first = tmpfiles.create("build", "a")
        second = tmpfiles.create("build", "b")

        assert first != second
        assert len(tmpfiles) == 2

    def test_create_script(self, temp_files_dir):
        tmpfiles = scripts.TemporaryFiles()

        path = tmpfiles.create_script("build", "cd %{build_path}\n", _CONTEXT)

        assert path.read_text() == "cd ~/cartage/demo/1/demo\n"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o700

    def test_create_script_render_error(self, temp_files_dir):
        tmpfiles = scripts.TemporaryFiles()

        with pytest.raises(errors.ScriptRenderError):
            tmpfiles.create_script("build", "%{bogus}", _CONTEXT)

        assert len(tmpfiles) == 0
        assert list(temp_files_dir.iterdir()) == []

    def test_cleanup(self, temp_files_dir):
        tmpfiles = scripts.TemporaryFiles()
        first = tmpfiles.create("a", "a")
        second = tmpfiles.create("b", "b")
        second.unlink()

        tmpfiles.cleanup()

        assert not first.exists()
        assert len(tmpfiles) == 0
        assert list(temp_files_dir.iterdir()) == []

    def test_cleanup_error(self, temp_files_dir, mocker, caplog):
        tmpfiles = scripts.TemporaryFiles()
        tmpfiles.create("a", "a")
        mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("denied"))

        tmpfiles.cleanup()

        assert len(tmpfiles) == 0
        assert "Cannot remove temporary file" in caplog.text

    def test_context_manager(self, temp_files_dir):
        with scripts.TemporaryFiles() as tmpfiles:
            path = tmpfiles.create("a", "a")
            assert path.exists()

        assert not path.exists()
        assert len(tmpfiles) == 0
