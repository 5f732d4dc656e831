# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Registry of live containers with per-name serialization.

``Container`` handles are not thread-safe.  A caller that dispatches
operations on the same container from several threads keeps the handles
in a ``ContainerRegistry`` and goes through ``run()``, which holds a lock
dedicated to that container for the duration of the operation.
Operations on different containers proceed in parallel.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

from provisioner.container import Container, ContainerState
from provisioner.errors import ProvisionerError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RegistryError(ProvisionerError):
    """Raised for unknown or duplicate container names."""


class ContainerRegistry:
    """Owns the map of live containers.

    Thread Safety:
        ``_containers`` and ``_locks`` are protected by ``_lock``.  Each
        container's operations are serialized by its own lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._containers: dict[str, Container] = {}
        self._locks: dict[str, threading.Lock] = {}

    def add(self, container: Container) -> None:
        """Track *container* under its name.

        Raises:
            RegistryError: If the name is already tracked.
        """
        with self._lock:
            if container.name in self._containers:
                raise RegistryError(
                    f"Container {container.name!r} is already registered"
                )
            self._containers[container.name] = container
            self._locks[container.name] = threading.Lock()
        logger.debug("Registered container %s", container.name)

    def get(self, name: str) -> Container:
        """Return the container tracked under *name*.

        Raises:
            RegistryError: If the name is unknown.
        """
        with self._lock:
            try:
                return self._containers[name]
            except KeyError:
                raise RegistryError(f"Unknown container {name!r}") from None

    def names(self) -> list[str]:
        """Return the tracked names, sorted."""
        with self._lock:
            return sorted(self._containers)

    def run(self, name: str, operation: Callable[[Container], T]) -> T:
        """Apply *operation* to a container while holding its lock.

        The entry is dropped once the container reaches REMOVED.

        Args:
            name: Container name.
            operation: Callable receiving the container, e.g.
                ``lambda c: c.ip()``.

        Returns:
            Whatever *operation* returns.

        Raises:
            RegistryError: If the name is unknown.
        """
        with self._lock:
            container = self._containers.get(name)
            container_lock = self._locks.get(name)
        if container is None or container_lock is None:
            raise RegistryError(f"Unknown container {name!r}")

        with container_lock:
            try:
                return operation(container)
            finally:
                if container.state is ContainerState.REMOVED:
                    self._forget(name, container)

    def _forget(self, name: str, container: Container) -> None:
        with self._lock:
            if self._containers.get(name) is container:
                del self._containers[name]
                del self._locks[name]
        logger.debug("Unregistered removed container %s", name)
