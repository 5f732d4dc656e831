# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for provisioner/inspection.py."""

import json

import pytest

from provisioner.inspection import (
    AddressUnavailableError,
    ContainerInspection,
    EmptyAddressError,
    InspectParseError,
    NetworkSettings,
    NetworkSettingsMissingError,
    parse_inspection,
)


class TestParseInspection:
    """Tests for parse_inspection."""

    def test_object_with_address(self) -> None:
        """Reads NetworkSettings.IpAddress from a JSON object."""
        inspection = parse_inspection(
            '{"NetworkSettings":{"IpAddress":"10.0.0.5"}}'
        )

        assert inspection.network_settings == NetworkSettings("10.0.0.5")
        assert inspection.ip_address() == "10.0.0.5"

    def test_array_payload(self) -> None:
        """Accepts the one-element array current runtimes print."""
        payload = [
            {
                "Id": "abc123",
                "NetworkSettings": {"IPAddress": "172.17.0.2"},
            }
        ]
        inspection = parse_inspection(json.dumps(payload))

        assert inspection.id == "abc123"
        assert inspection.ip_address() == "172.17.0.2"

    def test_ipaddress_spelling_fallback(self) -> None:
        """IPAddress is used when IpAddress is absent."""
        inspection = parse_inspection(
            '{"NetworkSettings":{"IPAddress":"10.1.1.1"}}'
        )
        assert inspection.ip_address() == "10.1.1.1"

    def test_ignores_unconsumed_fields(self) -> None:
        """Fields other than the consumed ones are ignored."""
        payload = {
            "Id": "abc",
            "State": {"Running": True},
            "Config": {"Image": "base"},
            "NetworkSettings": {"IpAddress": "10.0.0.9", "Ports": {}},
        }
        assert parse_inspection(json.dumps(payload)).ip_address() == "10.0.0.9"

    def test_null_network_settings(self) -> None:
        """Null NetworkSettings parses to None."""
        inspection = parse_inspection('{"NetworkSettings":null}')

        assert inspection.network_settings is None
        with pytest.raises(NetworkSettingsMissingError):
            inspection.ip_address()

    def test_missing_network_settings(self) -> None:
        """Absent NetworkSettings parses to None."""
        inspection = parse_inspection('{"Id":"abc"}')

        assert inspection.network_settings is None
        with pytest.raises(NetworkSettingsMissingError):
            inspection.ip_address()

    def test_empty_address(self) -> None:
        """Empty address raises EmptyAddressError."""
        inspection = parse_inspection('{"NetworkSettings":{"IpAddress":""}}')

        with pytest.raises(EmptyAddressError):
            inspection.ip_address()

    def test_missing_address_field(self) -> None:
        """NetworkSettings without an address field is an empty address."""
        inspection = parse_inspection('{"NetworkSettings":{}}')

        with pytest.raises(EmptyAddressError):
            inspection.ip_address()

    def test_absence_errors_share_base(self) -> None:
        """Both semantic-absence errors are AddressUnavailableError."""
        assert issubclass(NetworkSettingsMissingError, AddressUnavailableError)
        assert issubclass(EmptyAddressError, AddressUnavailableError)
        assert not issubclass(InspectParseError, AddressUnavailableError)

    @pytest.mark.parametrize(
        "text",
        [
            "not-json",
            "",
            "Error: No such object: abc",
            "[]",
            '"a string"',
            "42",
            '{"NetworkSettings":"10.0.0.5"}',
            '{"NetworkSettings":{"IpAddress":5}}',
            '{"NetworkSettings":[]}',
        ],
    )
    def test_malformed_payload_raises_parse_error(self, text: str) -> None:
        """Invalid JSON and wrong-typed fields raise InspectParseError."""
        with pytest.raises(InspectParseError):
            parse_inspection(text)

    def test_parse_error_chains_json_error(self) -> None:
        """The JSON decoder error is kept as the cause."""
        with pytest.raises(InspectParseError) as exc_info:
            parse_inspection("not-json")

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


class TestContainerInspection:
    """Tests for the ContainerInspection dataclass."""

    def test_frozen(self) -> None:
        """Instances are immutable."""
        inspection = ContainerInspection(id="a", network_settings=None)
        with pytest.raises(AttributeError):
            inspection.id = "b"  # type: ignore[misc]
