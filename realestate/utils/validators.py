"""
Entity validation rules.

Validators operate on plain field maps keyed by model attribute names, so the
same rules check creation payloads, full replacements and patched entities.
Each returns every failed rule as a message naming the wire field.
"""

from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional
from email_validator import validate_email, EmailNotValidError
import uuid

from realestate.config import settings
from realestate.utils.exceptions import ValidationError

MIN_YEAR = 1800
MIN_PASSWORD_LENGTH = 6
MAX_USER_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 150

# Column limits: Integer is 32-bit, BigInteger 64-bit, String(n) n characters
MAX_INTEGER = 2**31 - 1
MAX_BIG_INTEGER = 2**63 - 1
MAX_NAME_LENGTH = 255
MAX_ADDRESS_LENGTH = 500
MAX_PHOTO_LENGTH = 2048
MAX_DATE_LENGTH = 64


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str) or not email.strip():
        return False
    try:
        validate_email(email.strip(), check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


class EntityValidator:
    """Base validator: subclasses implement `validate`."""

    def validate(self, values: Mapping[str, Any]) -> List[str]:
        raise NotImplementedError

    def ensure_valid(self, values: Mapping[str, Any]) -> None:
        """
        Raise ValidationError listing every failed rule.

        Raises:
            ValidationError: If any rule fails
        """
        errors = self.validate(values)
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _required(values: Mapping[str, Any], checks: Iterable[tuple]) -> List[str]:
        return [f"{label} is required" for attr, label in checks if _blank(values.get(attr))]

    @staticmethod
    def _max_length(values: Mapping[str, Any], checks: Iterable[tuple]) -> List[str]:
        errors = []
        for attr, label, limit in checks:
            value = values.get(attr)
            if isinstance(value, str) and len(value) > limit:
                errors.append(f"{label} must be at most {limit} characters")
        return errors

    @staticmethod
    def _reference(values: Mapping[str, Any], attr: str, label: str) -> List[str]:
        value = values.get(attr)
        if _blank(value):
            return [f"{label} is required"]
        if not isinstance(value, uuid.UUID):
            return [f"{label} must be a valid id"]
        return []


class PropertyValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = self._required(values, [("name", "name"), ("address", "address")])
        errors.extend(self._max_length(values, [
            ("name", "name", MAX_NAME_LENGTH),
            ("address", "address", MAX_ADDRESS_LENGTH),
        ]))

        price = values.get("price")
        if not _is_number(price) or price <= 0:
            errors.append("price must be greater than 0")
        elif price > MAX_BIG_INTEGER:
            errors.append(f"price must be at most {MAX_BIG_INTEGER}")

        code_internal = values.get("code_internal")
        if not _is_number(code_internal) or code_internal <= 0:
            errors.append("codeInternal must be greater than 0")
        elif code_internal > MAX_INTEGER:
            errors.append(f"codeInternal must be at most {MAX_INTEGER}")

        current_year = datetime.now().year
        year = values.get("year")
        if not _is_number(year) or not MIN_YEAR <= year <= current_year:
            errors.append(f"year must be between {MIN_YEAR} and {current_year}")

        errors.extend(self._reference(values, "id_owner", "idOwner"))
        return errors


class OwnerValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = self._required(values, [
            ("name", "name"),
            ("address", "address"),
            ("photo", "photo"),
            ("birthday", "birthday"),
        ])
        errors.extend(self._max_length(values, [
            ("name", "name", MAX_NAME_LENGTH),
            ("address", "address", MAX_ADDRESS_LENGTH),
            ("photo", "photo", MAX_PHOTO_LENGTH),
            ("birthday", "birthday", MAX_DATE_LENGTH),
        ]))
        return errors


class ImageValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = self._reference(values, "id_property", "idProperty")
        errors.extend(self._required(values, [("file", "file")]))
        return errors


class TraceValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = self._required(values, [("date_sale", "dateSale"), ("name", "name")])
        errors.extend(self._max_length(values, [
            ("date_sale", "dateSale", MAX_DATE_LENGTH),
            ("name", "name", MAX_NAME_LENGTH),
        ]))

        value = values.get("value")
        if not _is_number(value) or value <= 0:
            errors.append("value must be greater than 0")
        elif value > MAX_BIG_INTEGER:
            errors.append(f"value must be at most {MAX_BIG_INTEGER}")

        tax = values.get("tax")
        if not _is_number(tax) or tax < 0:
            errors.append("tax must be greater than or equal to 0")
        elif tax > MAX_BIG_INTEGER:
            errors.append(f"tax must be at most {MAX_BIG_INTEGER}")

        errors.extend(self._reference(values, "id_property", "idProperty"))
        return errors


class UserValidator(EntityValidator):
    """
    User rules. The password is only checked when present unless
    `require_password` is set (creation).
    """

    def __init__(self, require_password: bool = False, allowed_roles: Optional[List[str]] = None):
        self.require_password = require_password
        self.allowed_roles = allowed_roles or settings.allowed_roles

    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []

        name = values.get("name")
        if _blank(name):
            errors.append("name is required")
        else:
            if len(name) > MAX_USER_NAME_LENGTH:
                errors.append(f"name must be at most {MAX_USER_NAME_LENGTH} characters")
            if not all(ch.isalpha() or ch.isspace() for ch in name):
                errors.append("name may only contain letters and spaces")

        email = values.get("email")
        if _blank(email):
            errors.append("email is required")
        else:
            if not is_valid_email(email):
                errors.append("email is not a valid email address")
            if len(email) > MAX_EMAIL_LENGTH:
                errors.append(f"email must be at most {MAX_EMAIL_LENGTH} characters")

        password = values.get("password")
        if _blank(password):
            if self.require_password:
                errors.append("password is required")
        elif len(password) < MIN_PASSWORD_LENGTH:
            errors.append(f"password must be at least {MIN_PASSWORD_LENGTH} characters")

        role = values.get("role")
        if role is not None and str(role).lower() not in self.allowed_roles:
            errors.append(f"role must be one of: {', '.join(self.allowed_roles)}")

        return errors


class LoginValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = []
        if not is_valid_email(values.get("email")):
            errors.append("email is not a valid email address")
        password = values.get("password")
        if _blank(password) or len(password) < MIN_PASSWORD_LENGTH:
            errors.append(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        return errors


class PasswordUpdateValidator(EntityValidator):
    def validate(self, values: Mapping[str, Any]) -> List[str]:
        errors = self._required(values, [("token", "token")])
        password = values.get("new_password")
        if _blank(password) or len(password) < MIN_PASSWORD_LENGTH:
            errors.append(f"newPassword must be at least {MIN_PASSWORD_LENGTH} characters")
        return errors
