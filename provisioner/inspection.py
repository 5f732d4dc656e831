# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Typed parsing of ``<runtime> inspect`` output.

Only the fields the provisioner consumes are modelled.  Runtimes print
either a single JSON object or (Docker and Podman today) a JSON array
holding one object per inspected container; both are accepted.

Failures fall into two groups that callers can tell apart:

- ``InspectParseError``: the text is not JSON, or a consumed field has the
  wrong type.
- ``AddressUnavailableError``: the payload is well formed but carries no
  usable address (``NetworkSettingsMissingError``, ``EmptyAddressError``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from provisioner.errors import ProvisionerError


class InspectParseError(ProvisionerError):
    """Raised when inspect output is not the expected JSON document."""


class AddressUnavailableError(ProvisionerError):
    """Raised when inspect output has no usable network address."""


class NetworkSettingsMissingError(AddressUnavailableError):
    """Raised when ``NetworkSettings`` is absent or null."""


class EmptyAddressError(AddressUnavailableError):
    """Raised when the address field is absent or empty."""


@dataclass(frozen=True)
class NetworkSettings:
    """Network section of an inspected container.

    Attributes:
        ip_address: Container address; empty when the runtime has none.
    """

    ip_address: str


@dataclass(frozen=True)
class ContainerInspection:
    """The parts of an inspected container the provisioner reads.

    Attributes:
        id: Runtime container id, empty when not reported.
        network_settings: Network section, None when absent or null.
    """

    id: str
    network_settings: NetworkSettings | None

    def ip_address(self) -> str:
        """Return the container address.

        Raises:
            NetworkSettingsMissingError: If there is no network section.
            EmptyAddressError: If the address is empty.
        """
        if self.network_settings is None:
            raise NetworkSettingsMissingError(
                "NetworkSettings is missing from container information"
            )
        if not self.network_settings.ip_address:
            raise EmptyAddressError("Container has no IP address")
        return self.network_settings.ip_address


def _optional_str(data: dict[str, Any], *keys: str) -> str:
    """Return the first present key's value as a string, or ``""``."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise InspectParseError(
                f"Expected string for {key}, got {type(value).__name__}"
            )
        return value
    return ""


def _parse_network_settings(raw: object) -> NetworkSettings | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InspectParseError(
            f"Expected object for NetworkSettings, got {type(raw).__name__}"
        )
    # Older runtimes spell the field IpAddress, current ones IPAddress
    return NetworkSettings(
        ip_address=_optional_str(raw, "IpAddress", "IPAddress")
    )


def parse_inspection(text: str) -> ContainerInspection:
    """Parse ``inspect`` output for a single container.

    Args:
        text: Raw command output.

    Returns:
        ContainerInspection with the consumed fields.

    Raises:
        InspectParseError: If the text is not a JSON object (or a
            non-empty array of objects), or a field has the wrong type.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InspectParseError(f"Invalid JSON from inspect: {e}") from e

    if isinstance(data, list):
        if not data:
            raise InspectParseError("Inspect returned an empty list")
        data = data[0]

    if not isinstance(data, dict):
        raise InspectParseError(
            f"Expected JSON object from inspect, got {type(data).__name__}"
        )

    return ContainerInspection(
        id=_optional_str(data, "Id", "ID"),
        network_settings=_parse_network_settings(data.get("NetworkSettings")),
    )
