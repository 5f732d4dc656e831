# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Centralized logging configuration with secret redaction.

Every runtime invocation is logged with its full argument list, and
launch arguments may carry values resolved from ``!env`` config tags
(tokens, passwords).  Those values are registered with ``SecretFilter``
so they never reach the log output.

Usage:
    # In entry points (the CLI)
    from provisioner.logging import configure_logging
    configure_logging(level=logging.INFO)

    # In library modules
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Stopping container %s", container_id)
"""

import logging
import re
from typing import ClassVar


class SecretFilter(logging.Filter):
    """Masks ``!env``-resolved values in runtime command lines.

    ``CommandExecutor`` logs the full argv of every runtime invocation,
    and ``docker:cmd:args`` may carry tokens read from the environment.
    ``ProvisionerConfig`` registers each such value here when it is
    resolved; the filter then rewrites the message and string arguments
    of every record passing through the handler.  ``redact()`` applies
    the same masking to text that is printed rather than logged, such
    as the CLI's failure line.

    Example:
        SecretFilter.register_secret("s3cr3t")
        handler.addFilter(SecretFilter())
        logger.info("Running command: %s", "docker run base --token s3cr3t")
        # Output: "Running command: docker run base --token [REDACTED]"
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask registered values in the record; never drops it."""
        if self._pattern is not None:
            record.msg = self.redact(str(record.msg))
            if record.args:
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        """Return *text* with every registered value replaced.

        Args:
            text: A command line, error message or other output.

        Returns:
            The text with each registered value replaced by
            '[REDACTED]'; unchanged when nothing is registered.
        """
        if cls._pattern is None:
            return text
        return cls._pattern.sub("[REDACTED]", text)

    @classmethod
    def register_secret(cls, secret: str) -> None:
        """Register a value resolved from the environment.

        Args:
            secret: Value to mask. Empty strings are ignored, since
                masking them would rewrite every message.
        """
        if secret:
            cls._secrets.add(secret)
            cls._rebuild_pattern()

    @classmethod
    def clear_secrets(cls) -> None:
        """Forget all registered values. Used by the test suite."""
        cls._secrets.clear()
        cls._pattern = None

    @classmethod
    def _rebuild_pattern(cls) -> None:
        if cls._secrets:
            # Longest first so a value containing another is fully masked
            ordered = sorted(cls._secrets, key=len, reverse=True)
            cls._pattern = re.compile("|".join(re.escape(s) for s in ordered))
        else:
            cls._pattern = None


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    add_secret_filter: bool = True,
) -> None:
    """Send provisioner logs to stderr.

    Replaces any handlers on the root logger with a single stream
    handler, so calling this twice (as tests do) does not duplicate
    output.

    Args:
        level: Root logger level.  The CLI passes INFO, or DEBUG
            with ``--debug``.
        format_string: Record format.  Defaults to timestamp, logger
            name, level and message.
        add_secret_filter: Attach ``SecretFilter`` to the handler.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))
    if add_secret_filter:
        handler.addFilter(SecretFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)
    root_logger.addHandler(handler)
