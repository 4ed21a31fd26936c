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

"""Remote build command line tool.

This is the main entry point for the cartage_remote package, invoked
when running `python -m cartage_remote` or `cartage-remote`. It reads a
project file, verifies the remote build configuration (using `--check`)
or builds the project on the configured remote host.
"""

import argparse
import logging
import sys
from typing import Any

import yaml

import cartage_remote
from cartage_remote import errors
from cartage_remote.build_manager import RemoteBuildManager
from cartage_remote.infos import ProjectInfo


def main():
    """Run the command-line interface."""
    options = _parse_arguments()

    if options.version:
        print(f"cartage-remote {cartage_remote.__version__}")
        sys.exit()

    if options.trace:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(level=log_level)

    try:
        _process_project(options)
    except OSError as err:
        msg = err.strerror
        if err.filename:
            msg = f"{err.filename}: {msg}"
        print(f"Error: {msg}.", file=sys.stderr)
        sys.exit(1)
    except errors.ConfigurationError as err:
        print(f"Error: invalid remote configuration: {err}", file=sys.stderr)
        sys.exit(2)
    except errors.RemoteCommandError as err:
        print(err, file=sys.stderr)
        sys.exit(err.status)
    except errors.RemoteBuildError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(3)
    except (ValueError, TypeError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(4)
    except RuntimeError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(5)


def _process_project(options: argparse.Namespace) -> None:
    with open(options.file) as project_file:
        project_data = yaml.safe_load(project_file)

    if not isinstance(project_data, dict):
        raise TypeError(f"{options.file}: project data is not a dictionary")

    project = ProjectInfo.unmarshal(project_data)
    remote_config = _remote_config(project_data, host=options.host)

    manager = RemoteBuildManager(remote_config, project=project, display=print)

    if options.check:
        manager.check_config(require_host=True, notify=_warn)
        print("Remote configuration is valid.")
        return

    manager.build()


def _remote_config(data: dict[str, Any], *, host: str | None) -> dict[str, Any] | None:
    plugins = data.get("plugins") or {}
    remote = plugins.get("remote")

    if remote is None or not host:
        return remote

    return {**remote, "host": host}


def _warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def _parse_arguments() -> argparse.Namespace:
    prog = "cartage-remote"
    description = "Build a project on a remote host using path-based isolation."

    parser = argparse.ArgumentParser(prog=prog, description=description, add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "-f",
        "--file",
        metavar="filename",
        default="cartage.yml",
        help="The project configuration file. Default is 'cartage.yml'.",
    )
    parser.add_argument(
        "--host",
        metavar="name",
        help="Build on the named host instead of the configured one.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify the remote configuration and exit.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable debug messages.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the cartage-remote version and exit.",
    )

    return parser.parse_args()
