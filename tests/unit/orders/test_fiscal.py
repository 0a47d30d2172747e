"""Unit tests for NF-e access key and URL validation."""

from __future__ import annotations

import random

import pytest

from modules.orders.fiscal import (
    fiscal_field_errors,
    nfe_check_digit,
    validate_nfe_access_key,
    validate_nfe_url,
)

pytestmark = pytest.mark.unit

VALID_KEY = "35240312345678000195550010000014761000047680"


def _reference_check_digit(payload: str) -> int:
    """Right-to-left weights 2..9 written out explicitly."""
    total = 0
    weight = 2
    for digit in reversed(payload):
        total += int(digit) * weight
        weight = 2 if weight == 9 else weight + 1
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


class TestCheckDigit:
    def test_fixture_key_check_digit(self):
        assert nfe_check_digit(VALID_KEY[:43]) == 0

    def test_matches_reference_for_random_payloads(self):
        rng = random.Random(20240301)
        for _ in range(500):
            payload = "".join(rng.choice("0123456789") for _ in range(43))
            assert nfe_check_digit(payload) == _reference_check_digit(payload)

    def test_random_keys_with_computed_digit_are_valid(self):
        rng = random.Random(7)
        for _ in range(200):
            payload = "".join(rng.choice("0123456789") for _ in range(43))
            assert validate_nfe_access_key(payload + str(nfe_check_digit(payload)))

    def test_wrong_digit_is_rejected(self):
        rng = random.Random(11)
        for _ in range(200):
            payload = "".join(rng.choice("0123456789") for _ in range(43))
            wrong = (nfe_check_digit(payload) + rng.randint(1, 9)) % 10
            assert not validate_nfe_access_key(payload + str(wrong))

    @pytest.mark.parametrize("payload", ["", "123", "a" * 43, "1" * 44])
    def test_malformed_payload_raises(self, payload):
        with pytest.raises(ValueError):
            nfe_check_digit(payload)


class TestValidateAccessKey:
    def test_fixture_key_is_valid(self):
        assert validate_nfe_access_key(VALID_KEY) is True

    def test_corrupted_last_digit_is_invalid(self):
        assert validate_nfe_access_key(VALID_KEY[:-1] + "1") is False

    @pytest.mark.parametrize(
        "key",
        [
            VALID_KEY[:-1],
            VALID_KEY + "0",
            VALID_KEY[:-1] + "X",
            "3524 0312345678000195550010000014761000047680",
            "",
            None,
            12345,
            "٣" * 44,
        ],
    )
    def test_shape_errors_return_false(self, key):
        assert validate_nfe_access_key(key) is False


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.nfe.fazenda.gov.br/portal/consulta.aspx?tipoConsulta=completa",
            "http://nfe.example.com/danfe/123.pdf",
            "ftp://files.example.com/nfe.xml",
        ],
    )
    def test_valid_urls(self, url):
        assert validate_nfe_url(url) is True

    @pytest.mark.parametrize("url", ["not a url", "www.example.com", "mailto:a@b.com", "", None])
    def test_invalid_urls(self, url):
        assert validate_nfe_url(url) is False


class TestFiscalFieldErrors:
    def test_no_fields_no_errors(self):
        assert fiscal_field_errors() == {}

    def test_valid_fields_no_errors(self):
        assert fiscal_field_errors(VALID_KEY, "https://nfe.example.com/1") == {}

    def test_shape_and_checksum_messages_differ(self):
        shape = fiscal_field_errors(nfe_access_key="123")
        checksum = fiscal_field_errors(nfe_access_key=VALID_KEY[:-1] + "1")
        assert "44 numeric digits" in shape["nfeAccessKey"]
        assert "Modulo 11" in checksum["nfeAccessKey"]

    def test_reports_every_offending_field(self):
        errors = fiscal_field_errors(nfe_access_key="abc", nfe_url="nope")
        assert set(errors) == {"nfeAccessKey", "nfeUrl"}
