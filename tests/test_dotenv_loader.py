# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for provisioner/dotenv_loader.py."""

from pathlib import Path
from unittest.mock import MagicMock, call, patch

from provisioner.dotenv_loader import (
    get_dotenv_path,
    load_dotenv_once,
    reset_dotenv_state,
)


class TestLoadDotenvOnce:
    """Tests for load_dotenv_once."""

    def setup_method(self) -> None:
        """Reset state before each test."""
        reset_dotenv_state()

    def test_idempotent(self, tmp_path: Path) -> None:
        """Second call is a no-op."""
        xdg_env = tmp_path / ".env"
        xdg_env.touch()
        with (
            patch("provisioner.dotenv_loader.load_dotenv") as mock_ld,
            patch(
                "provisioner.dotenv_loader.get_dotenv_path",
                return_value=xdg_env,
            ),
            patch(
                "provisioner.dotenv_loader.Path.cwd",
                return_value=tmp_path / "elsewhere",
            ),
        ):
            load_dotenv_once()
            load_dotenv_once()
        assert mock_ld.call_count == 1

    def test_loads_xdg_then_cwd(self, tmp_path: Path) -> None:
        """Both files are loaded, XDG first."""
        xdg_env = tmp_path / "config" / ".env"
        xdg_env.parent.mkdir()
        xdg_env.touch()
        cwd_env = tmp_path / "cwd" / ".env"
        cwd_env.parent.mkdir()
        cwd_env.touch()
        mock_ld = MagicMock()
        with (
            patch("provisioner.dotenv_loader.load_dotenv", mock_ld),
            patch(
                "provisioner.dotenv_loader.get_dotenv_path",
                return_value=xdg_env,
            ),
            patch(
                "provisioner.dotenv_loader.Path.cwd",
                return_value=cwd_env.parent,
            ),
        ):
            load_dotenv_once()
        assert mock_ld.call_args_list == [call(xdg_env), call(cwd_env)]

    def test_no_files(self, tmp_path: Path) -> None:
        """Nothing is loaded when neither file exists."""
        with (
            patch("provisioner.dotenv_loader.load_dotenv") as mock_ld,
            patch(
                "provisioner.dotenv_loader.get_dotenv_path",
                return_value=tmp_path / "missing" / ".env",
            ),
            patch(
                "provisioner.dotenv_loader.Path.cwd",
                return_value=tmp_path,
            ),
        ):
            load_dotenv_once()
        mock_ld.assert_not_called()

    def test_dotenv_path_location(self) -> None:
        """The .env file lives in the provisioner config directory."""
        path = get_dotenv_path()
        assert path.name == ".env"
        assert path.parent.name == "provisioner"
