# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Container lifecycle driver built on the container runtime's CLI.

Creates, starts, stops, removes, inspects and commits containers by
invoking ``docker`` (or ``podman``) as an external process and mapping its
textual output and failures to typed results and exceptions.
"""

from provisioner.config import ConfigError, ProvisionerConfig
from provisioner.container import (
    Container,
    ContainerCreateError,
    ContainerError,
    ContainerInspectError,
    ContainerState,
    ContainerStateError,
)
from provisioner.errors import ProvisionerError
from provisioner.executor import (
    CommandError,
    CommandExecutionError,
    CommandExecutor,
    CommandLaunchError,
    CommandResult,
    CommandTimeoutError,
)
from provisioner.image import CommitError, Image
from provisioner.inspection import (
    AddressUnavailableError,
    ContainerInspection,
    EmptyAddressError,
    InspectParseError,
    NetworkSettings,
    NetworkSettingsMissingError,
    parse_inspection,
)
from provisioner.registry import ContainerRegistry, RegistryError


__all__ = [
    # config
    "ConfigError",
    "ProvisionerConfig",
    # container
    "Container",
    "ContainerState",
    "ContainerError",
    "ContainerCreateError",
    "ContainerInspectError",
    "ContainerStateError",
    # image
    "Image",
    "CommitError",
    # executor
    "CommandExecutor",
    "CommandResult",
    "CommandError",
    "CommandExecutionError",
    "CommandLaunchError",
    "CommandTimeoutError",
    # inspection
    "ContainerInspection",
    "NetworkSettings",
    "parse_inspection",
    "InspectParseError",
    "AddressUnavailableError",
    "EmptyAddressError",
    "NetworkSettingsMissingError",
    # registry
    "ContainerRegistry",
    "RegistryError",
    # errors
    "ProvisionerError",
]
