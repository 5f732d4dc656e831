# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Images produced by committing containers.

Images are addressed by repository name rather than id.  The repository
name is ``<namespace>/<name>``, where the namespace comes from the
``docker:repository-namespace`` setting and is read at call time.
"""

from __future__ import annotations

import logging

from provisioner.config import ConfigError, ProvisionerConfig
from provisioner.errors import ProvisionerError
from provisioner.executor import CommandError, CommandExecutor


logger = logging.getLogger(__name__)

NAMESPACE_KEY = "docker:repository-namespace"


class CommitError(ProvisionerError):
    """Raised when the runtime fails to commit a container."""


class Image:
    """A runtime image identified by a logical name.

    Attributes:
        name: Caller-assigned image name.
        id: Runtime image id, usually left unset.
    """

    def __init__(
        self,
        name: str,
        config: ProvisionerConfig,
        executor: CommandExecutor | None = None,
        id: str | None = None,
    ) -> None:
        if not name:
            raise ValueError("Image name must not be empty")
        self.name = name
        self.id = id
        self._config = config
        self._executor = executor or CommandExecutor()

    def __repr__(self) -> str:
        return f"Image(name={self.name!r}, id={self.id!r})"

    def repository_name(self) -> str:
        """Return ``<namespace>/<name>``.

        Returns ``""`` (and logs a warning) when the namespace is not
        configured; ``commit()`` refuses to run in that case.
        """
        try:
            namespace = self._config.get_string(NAMESPACE_KEY)
        except ConfigError:
            logger.warning(
                "Provisioner is misconfigured: %s is missing", NAMESPACE_KEY
            )
            return ""
        return f"{namespace}/{self.name}"

    def commit(self, container_id: str) -> str:
        """Snapshot a container into this image's repository.

        Runs ``<binary> commit <container_id> <repository_name>``.

        Args:
            container_id: Runtime id of the source container.

        Returns:
            The repository name committed to.

        Raises:
            ValueError: If container_id is empty.
            ConfigError: If the binary or namespace is not configured.
            CommitError: If the runtime invocation fails.
        """
        if not container_id:
            raise ValueError("Container id must not be empty")

        try:
            binary = self._config.get_string("docker:binary")
            namespace = self._config.get_string(NAMESPACE_KEY)
        except ConfigError as e:
            logger.error("Provisioner is misconfigured: %s", e)
            raise

        repository = f"{namespace}/{self.name}"
        logger.info(
            "Committing container %s to image %s", container_id, repository
        )
        try:
            self._executor.run(
                binary,
                ["commit", container_id, repository],
                timeout=self._config.timeout,
            )
        except CommandError as e:
            logger.error("Could not commit image %s: %s", repository, e)
            raise CommitError(
                f"Failed to commit container {container_id} "
                f"to {repository}: {e}"
            ) from e

        logger.info("Committed container %s to %s", container_id, repository)
        return repository
