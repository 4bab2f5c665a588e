"""
Employees API — Employee Validation Rules
============================================

What:  Declarative field rule table for employee create/update payloads.
Why:   Create and update validate the same four fields with the same rules;
       the only difference is that update ignores the record's own email
       when checking uniqueness. One table, one parameter.
How:   EMPLOYEE_RULES maps each field to a FieldRules entry (the "required"
       message plus an ordered tuple of Rule objects). validate_employee()
       walks the table, collects every failing message per field, and
       raises ValidationError if anything failed.

Evaluation:
    - String values are stripped first; empty strings count as missing.
    - A missing field reports only its "required" message.
    - Otherwise every rule runs and every failure is reported, in order.
    - Unique rules query the store through the `lookup` callable and only
      run on string values.
"""

import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from app.exceptions import ValidationError

# (column, value, exclude_id) -> True when another row already holds value
UniqueLookup = Callable[[str, str, Optional[int]], Awaitable[bool]]

_NUMERIC_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_DIGITS_RE = re.compile(r"[0-9]+")


class Rule:
    """A single constraint on a present (non-empty) value."""

    def __init__(self, message: str):
        self.message = message

    def passes(self, value: Any) -> bool:
        raise NotImplementedError


class IsString(Rule):
    def passes(self, value: Any) -> bool:
        return isinstance(value, str)


class MaxLength(Rule):
    def __init__(self, limit: int, message: str):
        super().__init__(message)
        self.limit = limit

    def passes(self, value: Any) -> bool:
        # Non-strings are reported by IsString
        if not isinstance(value, str):
            return True
        return len(value) <= self.limit


class EmailFormat(Rule):
    """Email syntax only; no DNS or deliverability lookup."""

    def passes(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


class Numeric(Rule):
    def passes(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return True
        return isinstance(value, str) and _NUMERIC_RE.fullmatch(value) is not None


class DigitsBetween(Rule):
    def __init__(self, minimum: int, maximum: int, message: str):
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum

    def passes(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str) or _DIGITS_RE.fullmatch(value) is None:
            return False
        return self.minimum <= len(value) <= self.maximum


class Unique(Rule):
    """Value must not exist in `column` of another row. Checked against the store."""

    def __init__(self, column: str, message: str):
        super().__init__(message)
        self.column = column

    def passes(self, value: Any) -> bool:
        raise TypeError("Unique needs the store; use passes_in_store()")

    async def passes_in_store(
        self, value: Any, lookup: UniqueLookup, exclude_id: Optional[int]
    ) -> bool:
        if not isinstance(value, str):
            return True
        return not await lookup(self.column, value, exclude_id)


@dataclass(frozen=True)
class FieldRules:
    required_message: str
    rules: Tuple[Rule, ...]


EMPLOYEE_RULES: Dict[str, FieldRules] = {
    "name": FieldRules(
        required_message="El nombre es obligatorio",
        rules=(
            IsString("El nombre debe ser un texto"),
            MaxLength(255, "El nombre no puede tener más de 255 caracteres"),
        ),
    ),
    "email": FieldRules(
        required_message="El correo electrónico es obligatorio",
        rules=(
            IsString("El correo electrónico debe ser un texto"),
            EmailFormat("Por favor ingrese un correo electrónico válido"),
            MaxLength(255, "El correo electrónico no puede tener más de 255 caracteres"),
            Unique("email", "Este correo electrónico ya está registrado"),
        ),
    ),
    "phone": FieldRules(
        required_message="El teléfono es obligatorio",
        rules=(
            Numeric("El teléfono debe contener solo números"),
            DigitsBetween(8, 15, "El teléfono debe tener entre 8 y 15 dígitos"),
        ),
    ),
    "position": FieldRules(
        required_message="El cargo es obligatorio",
        rules=(
            IsString("El cargo debe ser un texto"),
            MaxLength(255, "El cargo no puede tener más de 255 caracteres"),
        ),
    ),
}


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict)) and not value:
        return True
    return False


def unique_message(field: str) -> str:
    """Message of the Unique rule on `field`; used when the database index fires."""
    for rule in EMPLOYEE_RULES[field].rules:
        if isinstance(rule, Unique):
            return rule.message
    raise KeyError(field)


async def validate_employee(
    payload: Mapping[str, Any],
    lookup: UniqueLookup,
    exclude_id: Optional[int] = None,
    rules: Optional[Dict[str, FieldRules]] = None,
) -> Dict[str, str]:
    """
    Apply the rule table to a create/update payload.

    Args:
        payload:    Decoded JSON body; keys outside the table are ignored.
        lookup:     Store query used by Unique rules.
        exclude_id: Row id to ignore in uniqueness checks (the record being updated).
        rules:      Rule table override, defaults to EMPLOYEE_RULES.

    Returns:
        Cleaned values for every field in the table (strings stripped,
        integer phones converted to their decimal string).

    Raises:
        ValidationError: with every failing field and all of its messages.
    """
    table = rules if rules is not None else EMPLOYEE_RULES
    errors: Dict[str, List[str]] = {}
    cleaned: Dict[str, str] = {}

    for field, spec in table.items():
        value = _normalize(payload.get(field))

        if _is_missing(value):
            errors[field] = [spec.required_message]
            continue

        messages: List[str] = []
        for rule in spec.rules:
            if isinstance(rule, Unique):
                ok = await rule.passes_in_store(value, lookup, exclude_id)
            else:
                ok = rule.passes(value)
            if not ok:
                messages.append(rule.message)

        if messages:
            errors[field] = messages
        else:
            cleaned[field] = value if isinstance(value, str) else str(value)

    if errors:
        raise ValidationError(errors=errors)
    return cleaned
