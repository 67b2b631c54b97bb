"""
Input validation for signup and profile forms.
"""

import re
from dataclasses import dataclass
from typing import Optional

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

# EU VAT number formats by country prefix
VAT_PATTERNS = {
    "AT": re.compile(r"^ATU\d{8}$"),
    "BE": re.compile(r"^BE[01]\d{9}$"),
    "BG": re.compile(r"^BG\d{9,10}$"),
    "HR": re.compile(r"^HR\d{11}$"),
    "CY": re.compile(r"^CY\d{8}[A-Z]$"),
    "CZ": re.compile(r"^CZ\d{8,10}$"),
    "DK": re.compile(r"^DK\d{8}$"),
    "EE": re.compile(r"^EE\d{9}$"),
    "FI": re.compile(r"^FI\d{8}$"),
    "FR": re.compile(r"^FR[A-HJ-NP-Z0-9]{2}\d{9}$"),
    "DE": re.compile(r"^DE\d{9}$"),
    "GR": re.compile(r"^(EL|GR)\d{9}$"),
    "EL": re.compile(r"^(EL|GR)\d{9}$"),
    "HU": re.compile(r"^HU\d{8}$"),
    "IE": re.compile(r"^IE(\d{7}[A-W][A-I]?|\d[A-Z]\d{5}[A-W])$"),
    "IT": re.compile(r"^IT\d{11}$"),
    "LV": re.compile(r"^LV\d{11}$"),
    "LT": re.compile(r"^LT(\d{9}|\d{12})$"),
    "LU": re.compile(r"^LU\d{8}$"),
    "MT": re.compile(r"^MT\d{8}$"),
    "NL": re.compile(r"^NL\d{9}B\d{2}$"),
    "PL": re.compile(r"^PL\d{10}$"),
    "PT": re.compile(r"^PT\d{9}$"),
    "RO": re.compile(r"^RO\d{2,10}$"),
    "SK": re.compile(r"^SK\d{10}$"),
    "SI": re.compile(r"^SI\d{8}$"),
    "ES": re.compile(r"^ES[A-Z0-9]\d{7}[A-Z0-9]$"),
    "SE": re.compile(r"^SE\d{12}$"),
}
DEFAULT_VAT_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{2,13}$")

SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

SUSPICIOUS_NAME_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+=", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
]


@dataclass
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


VALID = ValidationResult(True)


def validate_email(email: Optional[str]) -> ValidationResult:
    if not email or not email.strip():
        return ValidationResult(False, "Email is required")

    trimmed = email.strip().lower()
    if len(trimmed) > 254:
        return ValidationResult(False, "Email address is too long")

    if not EMAIL_REGEX.match(trimmed):
        return ValidationResult(False, "Invalid email format")

    local_part = trimmed.split("@", 1)[0]
    if len(local_part) > 64:
        return ValidationResult(False, "Email local part is too long")

    if ".." in local_part or local_part.startswith(".") or local_part.endswith("."):
        return ValidationResult(False, "Invalid email format")

    return VALID


def validate_password(password: Optional[str]) -> ValidationResult:
    if not password:
        return ValidationResult(False, "Password is required")
    if len(password) < 8:
        return ValidationResult(False, "Password must be at least 8 characters")
    if len(password) > 128:
        return ValidationResult(False, "Password is too long")

    complexity = sum([
        bool(re.search(r"[a-z]", password)),
        bool(re.search(r"[A-Z]", password)),
        bool(re.search(r"\d", password)),
        bool(SPECIAL_CHARS.search(password)),
    ])
    if complexity < 3:
        return ValidationResult(
            False,
            "Password must contain at least 3 of: lowercase, uppercase, number, special character",
        )
    return VALID


def normalize_vat_number(vat: str) -> str:
    return re.sub(r"[\s-]", "", vat.strip().upper())


def validate_vat_number(vat: Optional[str]) -> ValidationResult:
    # VAT is optional
    if not vat or not vat.strip():
        return VALID

    normalized = normalize_vat_number(vat)
    if len(normalized) < 4 or len(normalized) > 15:
        return ValidationResult(False, "VAT number length is invalid")

    pattern = VAT_PATTERNS.get(normalized[:2], DEFAULT_VAT_PATTERN)
    if not pattern.match(normalized):
        return ValidationResult(False, "Invalid VAT number format")
    return VALID


def validate_business_name(name: Optional[str]) -> ValidationResult:
    if not name or not name.strip():
        return ValidationResult(False, "Business name is required")

    trimmed = name.strip()
    if len(trimmed) < 2:
        return ValidationResult(False, "Business name must be at least 2 characters")
    if len(trimmed) > 100:
        return ValidationResult(False, "Business name is too long")

    for pattern in SUSPICIOUS_NAME_PATTERNS:
        if pattern.search(trimmed):
            return ValidationResult(False, "Business name contains invalid characters")
    return VALID


def sanitize_string(value: Optional[str]) -> str:
    """Strip markup-significant characters and cap length at 1000."""
    if not value:
        return ""
    return re.sub(r"[<>\"']", "", value.strip())[:1000]
