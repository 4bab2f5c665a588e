"""
Employees API — Validation Rule Table Tests
==============================================

What:  Tests for validate_employee() and the individual rules.
How:   Uniqueness lookups are stubbed; no database involved.

What we test:
    ✅ Valid payloads are cleaned (stripped, integer phone → string)
    ✅ Missing/blank fields report only their "required" message
    ✅ Every failing rule of a present field is reported, in order
    ✅ Uniqueness excludes the given id and is skipped for non-strings
"""

import pytest
from unittest.mock import AsyncMock

from app.exceptions import ValidationError
from app.services.employee_rules import (
    EMPLOYEE_RULES,
    DigitsBetween,
    EmailFormat,
    Numeric,
    unique_message,
    validate_employee,
)


def never_taken():
    return AsyncMock(return_value=False)


def always_taken():
    return AsyncMock(return_value=True)


async def errors_for(payload, lookup=None, exclude_id=None):
    with pytest.raises(ValidationError) as exc_info:
        await validate_employee(payload, lookup or never_taken(), exclude_id=exclude_id)
    return exc_info.value.errors


class TestValidPayloads:

    @pytest.mark.asyncio
    async def test_valid_payload_returns_cleaned_values(self, employee_payload):
        cleaned = await validate_employee(employee_payload, never_taken())
        assert cleaned == employee_payload

    @pytest.mark.asyncio
    async def test_strings_are_stripped(self):
        cleaned = await validate_employee(
            {"name": "  Ana  ", "email": " ana@x.com ", "phone": "12345678", "position": "Dev "},
            never_taken(),
        )
        assert cleaned["name"] == "Ana"
        assert cleaned["email"] == "ana@x.com"
        assert cleaned["position"] == "Dev"

    @pytest.mark.asyncio
    async def test_integer_phone_is_stored_as_string(self, employee_payload):
        employee_payload["phone"] = 987654321
        cleaned = await validate_employee(employee_payload, never_taken())
        assert cleaned["phone"] == "987654321"

    @pytest.mark.asyncio
    async def test_unknown_keys_are_ignored(self, employee_payload):
        employee_payload["salary"] = 1000
        cleaned = await validate_employee(employee_payload, never_taken())
        assert "salary" not in cleaned


class TestRequired:

    @pytest.mark.asyncio
    async def test_empty_payload_names_every_field(self):
        errors = await errors_for({})
        assert errors == {
            "name": ["El nombre es obligatorio"],
            "email": ["El correo electrónico es obligatorio"],
            "phone": ["El teléfono es obligatorio"],
            "position": ["El cargo es obligatorio"],
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", [None, "", "   ", [], {}])
    async def test_blank_values_count_as_missing(self, employee_payload, blank):
        employee_payload["name"] = blank
        errors = await errors_for(employee_payload)
        assert errors == {"name": ["El nombre es obligatorio"]}

    @pytest.mark.asyncio
    async def test_missing_email_skips_uniqueness_query(self, employee_payload):
        del employee_payload["email"]
        lookup = never_taken()
        await errors_for(employee_payload, lookup)
        lookup.assert_not_awaited()


class TestFieldRules:

    @pytest.mark.asyncio
    async def test_short_phone_reports_digits_between(self, employee_payload):
        employee_payload["phone"] = "123"
        errors = await errors_for(employee_payload)
        assert errors == {"phone": ["El teléfono debe tener entre 8 y 15 dígitos"]}

    @pytest.mark.asyncio
    async def test_long_phone_reports_digits_between(self, employee_payload):
        employee_payload["phone"] = "1" * 16
        errors = await errors_for(employee_payload)
        assert errors == {"phone": ["El teléfono debe tener entre 8 y 15 dígitos"]}

    @pytest.mark.asyncio
    async def test_non_numeric_phone_reports_both_rules(self, employee_payload):
        employee_payload["phone"] = "12ab5678"
        errors = await errors_for(employee_payload)
        assert errors == {
            "phone": [
                "El teléfono debe contener solo números",
                "El teléfono debe tener entre 8 y 15 dígitos",
            ]
        }

    @pytest.mark.asyncio
    async def test_decimal_phone_is_numeric_but_not_digits(self, employee_payload):
        employee_payload["phone"] = "1234.5678"
        errors = await errors_for(employee_payload)
        assert errors == {"phone": ["El teléfono debe tener entre 8 y 15 dígitos"]}

    @pytest.mark.asyncio
    async def test_long_name_reports_max(self, employee_payload):
        employee_payload["name"] = "a" * 256
        errors = await errors_for(employee_payload)
        assert errors == {"name": ["El nombre no puede tener más de 255 caracteres"]}

    @pytest.mark.asyncio
    async def test_name_of_exactly_255_chars_passes(self, employee_payload):
        employee_payload["name"] = "a" * 255
        cleaned = await validate_employee(employee_payload, never_taken())
        assert len(cleaned["name"]) == 255

    @pytest.mark.asyncio
    async def test_non_string_position_reports_string(self, employee_payload):
        employee_payload["position"] = 42
        errors = await errors_for(employee_payload)
        assert errors == {"position": ["El cargo debe ser un texto"]}

    @pytest.mark.asyncio
    async def test_malformed_email(self, employee_payload):
        employee_payload["email"] = "not-an-email"
        errors = await errors_for(employee_payload)
        assert errors == {"email": ["Por favor ingrese un correo electrónico válido"]}

    @pytest.mark.asyncio
    async def test_multiple_fields_fail_together(self, employee_payload):
        employee_payload["phone"] = "123"
        employee_payload["email"] = "broken"
        errors = await errors_for(employee_payload)
        assert set(errors) == {"phone", "email"}


class TestUnique:

    @pytest.mark.asyncio
    async def test_taken_email_reports_unique(self, employee_payload):
        errors = await errors_for(employee_payload, always_taken())
        assert errors == {"email": ["Este correo electrónico ya está registrado"]}

    @pytest.mark.asyncio
    async def test_lookup_receives_exclude_id(self, employee_payload):
        lookup = never_taken()
        await validate_employee(employee_payload, lookup, exclude_id=7)
        lookup.assert_awaited_once_with("email", "ana@x.com", 7)

    @pytest.mark.asyncio
    async def test_non_string_email_is_not_queried(self, employee_payload):
        employee_payload["email"] = 123
        lookup = always_taken()
        errors = await errors_for(employee_payload, lookup)
        lookup.assert_not_awaited()
        assert errors == {
            "email": [
                "El correo electrónico debe ser un texto",
                "Por favor ingrese un correo electrónico válido",
            ]
        }

    def test_unique_message_lookup(self):
        assert unique_message("email") == "Este correo electrónico ya está registrado"
        with pytest.raises(KeyError):
            unique_message("name")


class TestRuleObjects:

    def test_numeric_rejects_booleans(self):
        rule = Numeric("msg")
        assert rule.passes(True) is False
        assert rule.passes(12.5) is True
        assert rule.passes("-3e2") is True
        assert rule.passes("1_000") is False

    def test_digits_between_bounds_are_inclusive(self):
        rule = DigitsBetween(8, 15, "msg")
        assert rule.passes("1" * 8)
        assert rule.passes("1" * 15)
        assert not rule.passes("1" * 7)
        assert not rule.passes("١٢٣٤٥٦٧٨")  # non-ASCII digits

    def test_email_format_rejects_non_strings(self):
        assert EmailFormat("msg").passes(None) is False

    def test_rule_table_covers_the_four_fields(self):
        assert list(EMPLOYEE_RULES) == ["name", "email", "phone", "position"]
