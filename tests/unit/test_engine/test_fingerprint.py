"""Unit tests for request fingerprinting."""

from tagoio_engine.fetch.fingerprint import fingerprint, hash_string, identity_of
from tagoio_engine.fetch.models import RequestDescriptor


class TestHashString:
    """Tests for the rolling string hash."""

    def test_empty_string_is_zero(self) -> None:
        """Test that the empty string maps to the sentinel value."""
        assert hash_string("") == 0

    def test_known_values(self) -> None:
        """Test the 31-multiplier rolling hash on short inputs."""
        assert hash_string("a") == 97
        assert hash_string("ab") == 97 * 31 + 98

    def test_result_fits_signed_32_bits(self) -> None:
        """Test that long inputs wrap into the signed 32-bit range."""
        value = hash_string("x" * 1000)

        assert -(2**31) <= value < 2**31

    def test_wraps_to_negative(self) -> None:
        """Test that overflow produces negative values like a 32-bit int."""
        assert hash_string("zzzzzz") == -685785664


class TestIdentityOf:
    """Tests for identity header extraction."""

    def test_token_header(self) -> None:
        """Test that the token header is the identity."""
        assert identity_of({"token": "abc"}) == "abc"

    def test_case_insensitive(self) -> None:
        """Test that header lookup ignores case."""
        assert identity_of({"Authorization": "Bearer x"}) == "Bearer x"

    def test_token_preferred_over_authorization(self) -> None:
        """Test identity header priority order."""
        headers = {"Authorization": "Bearer x", "Token": "abc"}

        assert identity_of(headers) == "abc"

    def test_missing_identity(self) -> None:
        """Test that no identity header yields None."""
        assert identity_of({"Accept": "*/*"}) is None


class TestFingerprint:
    """Tests for descriptor fingerprints."""

    def test_deterministic_for_equal_descriptors(self) -> None:
        """Test that structurally equal descriptors share a fingerprint."""
        first = RequestDescriptor(
            url="https://api.tago.io/device",
            params={"page": 1, "filter": {"tags": ["a", "b"]}},
            headers={"token": "abc"},
        )
        second = RequestDescriptor(
            url="https://api.tago.io/device",
            params={"filter": {"tags": ["a", "b"]}, "page": 1},
            headers={"token": "abc"},
        )

        assert fingerprint(first) == fingerprint(second)
        assert fingerprint(first) == fingerprint(first)

    def test_method_case_does_not_matter(self) -> None:
        """Test that methods are normalized before hashing."""
        lower = RequestDescriptor(url="https://api.tago.io/x", method="post", body={"a": 1})
        upper = RequestDescriptor(url="https://api.tago.io/x", method="POST", body={"a": 1})

        assert fingerprint(lower) == fingerprint(upper)

    def test_differs_by_url_params_body_method(self) -> None:
        """Test that each identity component changes the fingerprint."""
        base = RequestDescriptor(
            url="https://api.tago.io/device", method="POST", params={"a": 1}, body={"b": 2}
        )
        variants = [
            RequestDescriptor(
                url="https://api.tago.io/account", method="POST", params={"a": 1}, body={"b": 2}
            ),
            RequestDescriptor(
                url="https://api.tago.io/device", method="PUT", params={"a": 1}, body={"b": 2}
            ),
            RequestDescriptor(
                url="https://api.tago.io/device", method="POST", params={"a": 2}, body={"b": 2}
            ),
            RequestDescriptor(
                url="https://api.tago.io/device", method="POST", params={"a": 1}, body={"b": 3}
            ),
        ]

        fingerprints = {fingerprint(base)} | {fingerprint(v) for v in variants}

        assert len(fingerprints) == 5

    def test_identity_header_is_part_of_fingerprint(self) -> None:
        """Test that different credentials never share a fingerprint."""
        alice = RequestDescriptor(url="https://api.tago.io/info", headers={"token": "alice"})
        bob = RequestDescriptor(url="https://api.tago.io/info", headers={"token": "bob"})

        assert fingerprint(alice) != fingerprint(bob)

    def test_unrelated_headers_are_ignored(self) -> None:
        """Test that non-identity headers do not affect the fingerprint."""
        plain = RequestDescriptor(url="https://api.tago.io/info", headers={"token": "t"})
        extra = RequestDescriptor(
            url="https://api.tago.io/info", headers={"token": "t", "X-Trace": "1"}
        )

        assert fingerprint(plain) == fingerprint(extra)
