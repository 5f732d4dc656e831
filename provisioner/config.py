# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Configuration for the container provisioner.

Configuration is loaded from a YAML file.  The default location follows
the XDG Base Directory Specification:

    ``$XDG_CONFIG_HOME/provisioner/provisioner.yaml``
    (typically ``~/.config/provisioner/provisioner.yaml``)

and can be overridden with ``$PROVISIONER_CONFIG``.  ``!env`` tags resolve
values from environment variables.

Example::

    docker:
      binary: docker
      image: base
      cmd:
        bin: /var/lib/app/start
        args: [--port, "8888", !env APP_TOKEN]
      repository-namespace: tsuru
      timeout: 300

Values are addressed with colon-separated keys (``docker:cmd:args``) and
resolved on every lookup, so a change made through ``set()`` is seen by
the next operation that reads the key.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path

from provisioner.dotenv_loader import APP_NAME, load_dotenv_once
from provisioner.errors import ProvisionerError
from provisioner.logging import SecretFilter


logger = logging.getLogger(__name__)

#: Environment variable that overrides the default config path.
CONFIG_PATH_ENV = "PROVISIONER_CONFIG"

#: Default per-invocation deadline in seconds.
DEFAULT_TIMEOUT = 300


class ConfigError(ProvisionerError):
    """Raised when a required setting is missing or malformed."""


def get_config_path() -> Path:
    """Return the config file path.

    Uses ``$PROVISIONER_CONFIG`` when set, otherwise the XDG location.
    """
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return user_config_path(APP_NAME) / "provisioner.yaml"


# ---------------------------------------------------------------------------
# YAML tag placeholders
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


# ---------------------------------------------------------------------------
# Value resolution
# ---------------------------------------------------------------------------


def _raw_resolve(value: object) -> str | None:
    """Resolve an ``_EnvVar`` to its string value, or stringify literals.

    Returns None if the value is None or the env var is unset/empty.
    Values read from the environment are registered for log redaction.
    """
    if isinstance(value, _EnvVar):
        resolved = os.environ.get(value.var_name) or None
        if resolved:
            SecretFilter.register_secret(resolved)
        return resolved
    if value is None:
        return None
    return str(value)


def _missing(key: str, value: object) -> ConfigError:
    if isinstance(value, _EnvVar):
        return ConfigError(
            f"Required config '{key}': environment variable "
            f"'{value.var_name}' is not set"
        )
    return ConfigError(f"Required config '{key}' is missing")


class ProvisionerConfig:
    """Read access to the provisioner settings.

    Wraps the parsed (but unresolved) YAML mapping.  Each getter walks the
    mapping and resolves ``!env`` tags at call time.

    Attributes:
        path: File the settings were loaded from, if any.
    """

    def __init__(
        self, raw: dict[str, Any] | None = None, path: Path | None = None
    ) -> None:
        self._raw: dict[str, Any] = raw if raw is not None else {}
        self.path = path

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> ProvisionerConfig:
        """Load configuration from a YAML file.

        A ``.env`` file is loaded first if present.

        Args:
            config_path: Path to the YAML file.  Defaults to
                ``get_config_path()``.

        Raises:
            ConfigError: If the file is missing, unreadable or not a YAML
                mapping.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = get_config_path()

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                raw = yaml.load(f, Loader=_make_loader())
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(
                f"Cannot read config file {config_path}: {e}"
            ) from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )

        logger.debug("Loaded config from %s", config_path)
        return cls(raw, path=config_path)

    def _lookup(self, key: str) -> object:
        """Walk the mapping along a colon-separated key."""
        node: object = self._raw
        for part in key.split(":"):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get_string(self, key: str) -> str:
        """Return a required string setting.

        Raises:
            ConfigError: If the value is absent, empty, or not a scalar.
        """
        value = self._lookup(key)
        if isinstance(value, (dict, list)):
            raise ConfigError(
                f"Config '{key}' must be a string, "
                f"got {type(value).__name__}"
            )
        resolved = _raw_resolve(value)
        if not resolved:
            raise _missing(key, value)
        return resolved

    def get_list(self, key: str) -> list[str]:
        """Return a required list of strings.

        An empty list is a valid value.  Elements that resolve to nothing
        (unset ``!env`` variables) are dropped.

        Raises:
            ConfigError: If the value is absent or not a list.
        """
        value = self._lookup(key)
        if value is None:
            raise _missing(key, value)
        if not isinstance(value, list):
            raise ConfigError(
                f"Config '{key}' must be a list, got {type(value).__name__}"
            )

        result: list[str] = []
        for item in value:
            resolved = _raw_resolve(item)
            if resolved:
                result.append(resolved)
        return result

    def get_int(self, key: str, default: int) -> int:
        """Return an integer setting, or *default* when absent.

        Raises:
            ConfigError: If the value cannot be converted to int.
        """
        value = self._lookup(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        resolved = _raw_resolve(value)
        if resolved is None:
            return default
        try:
            return int(resolved)
        except ValueError:
            raise ConfigError(
                f"Config '{key}' must be an integer, got {resolved!r}"
            ) from None

    def set(self, key: str, value: object) -> None:
        """Set a value, creating intermediate mappings as needed."""
        *parents, leaf = key.split(":")
        node = self._raw
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value

    def unset(self, key: str) -> None:
        """Remove a value.  Missing keys are ignored."""
        *parents, leaf = key.split(":")
        node: object = self._raw
        for part in parents:
            if not isinstance(node, dict):
                return
            node = node.get(part)
        if isinstance(node, dict):
            node.pop(leaf, None)

    @property
    def timeout(self) -> int:
        """Per-invocation deadline in seconds (``docker:timeout``)."""
        timeout = self.get_int("docker:timeout", DEFAULT_TIMEOUT)
        if timeout < 1:
            raise ConfigError(
                f"Config 'docker:timeout' must be >= 1: {timeout}"
            )
        return timeout
