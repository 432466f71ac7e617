"""
Input validation functions for Gubaye.

All validation functions follow the pattern:
1. Accept raw user input (string, int, etc.)
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError
"""

import re


class ValidationError(ValueError):
    """Raised when user input fails validation.

    Subclasses ValueError so Pydantic field validators report it as a 422.
    """

    pass


# ============================================================================
# Free Text
# ============================================================================


def normalize_text(value: str | None) -> str:
    """Strip and collapse internal whitespace; None becomes an empty string."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", value.strip())


# ============================================================================
# Batch Label Validation
# ============================================================================


def validate_batch_label(batch: str | None) -> str:
    """
    Validate and normalize batch labels.

    Accepts:
    - "2023/2024"
    - "2023-2024" / "2023 / 2024"

    Normalizes to: YYYY/YYYY where the second year follows the first.
    Empty input is returned as "" (an unset batch).

    Raises:
        ValidationError: If the label is malformed
    """
    if batch is None:
        return ""

    cleaned = re.sub(r"\s+", "", batch)
    if cleaned == "":
        return ""

    match = re.fullmatch(r"(\d{4})[/\-](\d{4})", cleaned)
    if not match:
        raise ValidationError("Invalid batch format (expected 'YYYY/YYYY')")

    start, end = int(match.group(1)), int(match.group(2))
    if end != start + 1:
        raise ValidationError("Invalid batch range (second year must follow the first)")

    return f"{start}/{end}"


# ============================================================================
# Contact Validation
# ============================================================================


def validate_phone_number(phone: str | None) -> str | None:
    """
    Normalize an optional phone override.

    Removes spaces, dashes and parentheses; keeps a leading +.
    Empty input returns None.

    Raises:
        ValidationError: If the number contains letters or has an invalid length
    """
    if phone is None or phone.strip() == "":
        return None

    if re.search(r"[a-zA-Z]", phone):
        raise ValidationError("Invalid phone number format")

    cleaned = re.sub(r"[\s\-\(\)]", "", phone)

    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if not digits.isdigit():
        raise ValidationError("Invalid phone number format (must contain only digits)")

    if not 9 <= len(digits) <= 15:
        raise ValidationError("Invalid phone number length")

    return cleaned


def validate_email(email: str | None) -> str | None:
    """Lower-case an optional email and check its basic shape."""
    if email is None or email.strip() == "":
        return None

    cleaned = email.strip().lower()
    if not re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", cleaned):
        raise ValidationError("Invalid email address")

    return cleaned
