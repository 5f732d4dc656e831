# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Container lifecycle driven through the runtime's command line.

A ``Container`` starts ``UNBORN`` with only a logical name.  ``create()``
runs the configured image detached and records the runtime id; the
container is running from then on, so ``start()`` only does work after a
``stop()``.  ``remove()`` is allowed with or without a prior ``stop()``
and ends the lifecycle: every later operation raises
``ContainerStateError``.

Transitions::

    UNBORN  --create--> RUNNING
    RUNNING --stop----> STOPPED   (stop is accepted again from STOPPED)
    STOPPED --start---> RUNNING   (start is a no-op from RUNNING)
    RUNNING --remove--> REMOVED
    STOPPED --remove--> REMOVED

Instances are not synchronized; callers that share one handle between
threads serialize access themselves (see ``ContainerRegistry``).
"""

from __future__ import annotations

import logging
from enum import Enum

from provisioner.config import ConfigError, ProvisionerConfig
from provisioner.errors import ProvisionerError
from provisioner.executor import CommandError, CommandExecutor, CommandResult
from provisioner.inspection import (
    AddressUnavailableError,
    InspectParseError,
    parse_inspection,
)


logger = logging.getLogger(__name__)


class ContainerState(Enum):
    """Lifecycle state of a container handle."""

    UNBORN = "unborn"
    RUNNING = "running"
    STOPPED = "stopped"
    REMOVED = "removed"


class ContainerError(ProvisionerError):
    """Base exception for container operation errors."""


class ContainerStateError(ContainerError):
    """Raised when an operation is invalid for the current state."""


class ContainerCreateError(ContainerError):
    """Raised when the runtime reports success but no container id."""


class ContainerInspectError(ContainerError):
    """Raised when the inspect command itself fails."""


class Container:
    """A runtime container identified by a logical name.

    Attributes:
        name: Caller-assigned identifier, stable for the container's life.
        state: Current lifecycle state.
    """

    def __init__(
        self,
        name: str,
        config: ProvisionerConfig,
        executor: CommandExecutor | None = None,
    ) -> None:
        """Initialize an unborn container handle.

        Args:
            name: Logical container name.
            config: Settings read on every operation.
            executor: Command runner.  Defaults to a new CommandExecutor.
        """
        self.name = name
        self.state = ContainerState.UNBORN
        self._id = ""
        self._config = config
        self._executor = executor or CommandExecutor()

    @classmethod
    def attach(
        cls,
        name: str,
        container_id: str,
        config: ProvisionerConfig,
        executor: CommandExecutor | None = None,
        state: ContainerState = ContainerState.RUNNING,
    ) -> Container:
        """Return a handle for a container created earlier.

        Raises:
            ValueError: If the id is empty or the state is UNBORN.
        """
        if not container_id:
            raise ValueError("Container id must not be empty")
        if state is ContainerState.UNBORN:
            raise ValueError("Attached container cannot be unborn")
        container = cls(name, config, executor)
        container._id = container_id
        container.state = state
        return container

    @property
    def id(self) -> str:
        """Runtime-assigned id; empty until ``create()`` succeeds."""
        return self._id

    def __repr__(self) -> str:
        return (
            f"Container(name={self.name!r}, id={self._id!r}, "
            f"state={self.state.value})"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, operation: str, *allowed: ContainerState) -> None:
        if self.state not in allowed:
            logger.error(
                "Cannot %s container %s: state is %s",
                operation,
                self.name,
                self.state.value,
            )
            raise ContainerStateError(
                f"Cannot {operation} container {self.name!r} "
                f"in state {self.state.value}"
            )

    def _setting(self, key: str) -> str:
        try:
            return self._config.get_string(key)
        except ConfigError as e:
            logger.error("Misconfigured: %s", e)
            raise

    def _run(self, binary: str, *arguments: str) -> CommandResult:
        return self._executor.run(
            binary, list(arguments), timeout=self._config.timeout
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self) -> str:
        """Run the base image detached and record the new container id.

        Runs ``<binary> run -d <image> <cmd> <args...>``.

        Returns:
            The runtime container id.

        Raises:
            ContainerStateError: If the container was already created.
            ConfigError: If a required setting is missing.
            CommandError: If the runtime invocation fails.
            ContainerCreateError: If the runtime printed no id.
        """
        self._require("create", ContainerState.UNBORN)
        binary = self._setting("docker:binary")
        image = self._setting("docker:image")
        command = self._setting("docker:cmd:bin")
        try:
            arguments = self._config.get_list("docker:cmd:args")
        except ConfigError as e:
            logger.error("Misconfigured: %s", e)
            raise

        result = self._run(binary, "run", "-d", image, command, *arguments)

        output = result.output
        container_id = output[:-1] if output.endswith("\n") else output
        if not container_id:
            logger.error("Runtime returned no id for container %s", self.name)
            raise ContainerCreateError(
                f"Runtime returned no id for container {self.name!r}"
            )

        self._id = container_id
        self.state = ContainerState.RUNNING
        logger.info("Created container %s: id=%s", self.name, container_id)
        return container_id

    def start(self) -> None:
        """Start the container.

        Containers run from ``create()`` on, so this is a no-op while
        RUNNING.  A STOPPED container is started with ``<binary> start``.

        Raises:
            ContainerStateError: If the container is UNBORN or REMOVED.
            ConfigError: If the binary is not configured.
            CommandError: If the runtime invocation fails.
        """
        self._require("start", ContainerState.RUNNING, ContainerState.STOPPED)
        if self.state is ContainerState.RUNNING:
            logger.debug("Container %s already running", self._id)
            return

        binary = self._setting("docker:binary")
        logger.info("Starting container %s", self._id)
        try:
            self._run(binary, "start", self._id)
        except CommandError as e:
            logger.error("Failed to start container %s: %s", self._id, e)
            raise
        self.state = ContainerState.RUNNING

    def stop(self) -> None:
        """Stop the container with ``<binary> stop <id>``.

        Stopping an already stopped container still reaches the runtime;
        whatever it reports is surfaced.

        Raises:
            ContainerStateError: If the container is UNBORN or REMOVED.
            ConfigError: If the binary is not configured.
            CommandError: If the runtime invocation fails.
        """
        self._require("stop", ContainerState.RUNNING, ContainerState.STOPPED)
        binary = self._setting("docker:binary")
        logger.info("Stopping container %s", self._id)
        try:
            result = self._run(binary, "stop", self._id)
        except CommandError as e:
            logger.error("Failed to stop container %s: %s", self._id, e)
            raise
        logger.info("Runtime stop output: %s", result.output.strip())
        self.state = ContainerState.STOPPED

    def remove(self) -> None:
        """Remove the container with ``<binary> rm <id>``.

        Routes pointing at the container are not touched.

        Raises:
            ContainerStateError: If the container is UNBORN or REMOVED.
            ConfigError: If the binary is not configured.
            CommandError: If the runtime invocation fails.
        """
        self._require("remove", ContainerState.RUNNING, ContainerState.STOPPED)
        binary = self._setting("docker:binary")
        logger.info("Removing container %s", self._id)
        try:
            self._run(binary, "rm", self._id)
        except CommandError as e:
            logger.error("Failed to remove container %s: %s", self._id, e)
            raise
        self.state = ContainerState.REMOVED
        logger.info("Removed container %s", self._id)

    def ip(self) -> str:
        """Resolve the container's network address via ``inspect``.

        Returns:
            The container IP address.

        Raises:
            ContainerStateError: If the container is UNBORN or REMOVED.
            ConfigError: If the binary is not configured.
            ContainerInspectError: If the inspect invocation fails.
            InspectParseError: If the output is not the expected JSON.
            NetworkSettingsMissingError: If NetworkSettings is absent/null.
            EmptyAddressError: If the address is empty.
        """
        self._require("inspect", ContainerState.RUNNING, ContainerState.STOPPED)
        binary = self._setting("docker:binary")
        logger.info("Getting IP address of container %s", self._id)

        try:
            result = self._run(binary, "inspect", self._id)
        except CommandError as e:
            logger.error(
                "Failed to inspect container %s for its IP address: %s",
                self._id,
                e,
            )
            raise ContainerInspectError(
                f"Failed to inspect container {self._id}: {e}"
            ) from e

        try:
            address = parse_inspection(result.output).ip_address()
        except InspectParseError as e:
            logger.error(
                "Failed to parse inspect output for container %s: %s",
                self._id,
                e,
            )
            raise
        except AddressUnavailableError as e:
            logger.error("Container %s has no address: %s", self._id, e)
            raise

        logger.info("Container %s IP address: %s", self._id, address)
        return address
