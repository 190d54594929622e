"""
Pure field validators.

Every predicate takes a string (plus bounds where relevant) and returns a
bool; the composite checks return a list of ``{"field", "message"}`` dicts,
empty when the input is valid.
"""
import re
from datetime import date
from typing import Callable, List, Mapping, Optional, TypedDict

# Patterns are applied with fullmatch, so a trailing newline never passes.
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PASSWORD_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}")
EXPIRY_RE = re.compile(r"(0[1-9]|1[0-2])/(\d{2})")
EXPIRY_PARTS_RE = re.compile(r"(\d{1,2})/(\d{2})")
CVV_RE = re.compile(r"\d{3,4}")
PHONE_RE = re.compile(r"\+?[\d\s-]{10,}")
ZIP_RE = re.compile(r"\d{5}(-\d{4})?")
NUMERIC_RE = re.compile(r"\d+")
ALPHABETIC_RE = re.compile(r"[a-zA-Z\s]+")
ALPHANUMERIC_RE = re.compile(r"[a-zA-Z0-9\s]+")

CARD_METHODS = ("credit_card", "debit_card")


class FieldError(TypedDict):
    field: str
    message: str


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(email))


def validate_password(password: str) -> bool:
    # At least 8 characters, 1 uppercase, 1 lowercase, 1 number
    return bool(PASSWORD_RE.fullmatch(password))


def validate_card_number(card_number: str) -> bool:
    """Luhn checksum over the digits of ``card_number``, separators ignored."""
    digits = re.sub(r"\D", "", card_number)
    if not digits:
        return False

    total = 0
    for i, ch in enumerate(reversed(digits)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return total % 10 == 0


def validate_expiry_date(expiry_date: str, today: Optional[date] = None) -> bool:
    """MM/YY, month in 1..12 and not before the current month."""
    match = EXPIRY_PARTS_RE.fullmatch(expiry_date)
    if not match:
        return False

    exp_month, exp_year = int(match.group(1)), int(match.group(2))
    today = today or date.today()
    current_year = today.year % 100

    if exp_month < 1 or exp_month > 12:
        return False
    if exp_year < current_year:
        return False
    if exp_year == current_year and exp_month < today.month:
        return False

    return True


def validate_cvv(cvv: str) -> bool:
    return bool(CVV_RE.fullmatch(cvv))


def validate_phone_number(phone: str) -> bool:
    return bool(PHONE_RE.fullmatch(phone))


def validate_zip_code(zip_code: str) -> bool:
    return bool(ZIP_RE.fullmatch(zip_code))


def validate_required(value: str) -> bool:
    return len(value.strip()) > 0


def validate_min_length(value: str, min_length: int) -> bool:
    return len(value) >= min_length


def validate_max_length(value: str, max_length: int) -> bool:
    return len(value) <= max_length


def validate_numeric(value: str) -> bool:
    return bool(NUMERIC_RE.fullmatch(value))


def validate_alphabetic(value: str) -> bool:
    return bool(ALPHABETIC_RE.fullmatch(value))


def validate_alphanumeric(value: str) -> bool:
    return bool(ALPHANUMERIC_RE.fullmatch(value))


def validate_field(value: str, rules: Mapping) -> Optional[str]:
    """
    Apply a rule set to a single form value and return the first failing
    message, or None when every rule passes.

    Supported rules: required, email, password, min_length, max_length,
    numeric, alphabetic, alphanumeric and custom (a ``str -> bool`` callable).
    Format rules are only checked on non-empty values.
    """
    if rules.get("required") and not validate_required(value):
        return "This field is required"

    if not value:
        return None

    if rules.get("email") and not validate_email(value):
        return "Invalid email address"
    if rules.get("password") and not validate_password(value):
        return "Password must be at least 8 characters with 1 uppercase, 1 lowercase, and 1 number"
    if rules.get("min_length") and not validate_min_length(value, rules["min_length"]):
        return f"Minimum length is {rules['min_length']} characters"
    if rules.get("max_length") and not validate_max_length(value, rules["max_length"]):
        return f"Maximum length is {rules['max_length']} characters"
    if rules.get("numeric") and not validate_numeric(value):
        return "Must contain only numbers"
    if rules.get("alphabetic") and not validate_alphabetic(value):
        return "Must contain only letters"
    if rules.get("alphanumeric") and not validate_alphanumeric(value):
        return "Must contain only letters and numbers"

    custom: Optional[Callable[[str], bool]] = rules.get("custom")
    if custom and not custom(value):
        return "Invalid value"

    return None


def validate_shipping_address(address: Mapping[str, str]) -> List[FieldError]:
    errors: List[FieldError] = []

    for field, label in (
        ("street", "Street"),
        ("city", "City"),
        ("state", "State"),
        ("country", "Country"),
    ):
        if not validate_required(address.get(field) or ""):
            errors.append({"field": field, "message": f"{label} is required"})

    zip_code = address.get("zip_code") or ""
    if not validate_required(zip_code):
        errors.append({"field": "zip_code", "message": "Postal code is required"})
    elif not validate_zip_code(zip_code):
        errors.append({
            "field": "zip_code",
            "message": "Please enter a valid postal code (e.g., 12345 or 12345-6789)",
        })

    phone = address.get("phone")
    if phone is not None and not validate_phone_number(phone):
        errors.append({"field": "phone", "message": "Please enter a valid phone number"})

    return errors


def validate_payment_details(
    method: str,
    card: Optional[Mapping[str, str]],
    today: Optional[date] = None,
) -> List[FieldError]:
    """Card checks for card payment methods; other methods need no details."""
    errors: List[FieldError] = []
    if method not in CARD_METHODS:
        return errors

    card = card or {}
    card_number = card.get("number") or ""
    expiry = card.get("expiry") or ""
    cvv = card.get("cvv") or ""

    if not card_number:
        errors.append({"field": "card_number", "message": "Card number is required"})
    elif not validate_card_number(card_number):
        errors.append({"field": "card_number", "message": "Please enter a valid card number"})

    if not expiry:
        errors.append({"field": "expiry_date", "message": "Expiry date is required"})
    elif not EXPIRY_RE.fullmatch(expiry):
        errors.append({"field": "expiry_date", "message": "Please enter a valid expiry date (MM/YY)"})
    elif not validate_expiry_date(expiry, today):
        errors.append({"field": "expiry_date", "message": "Card has expired"})

    if not cvv:
        errors.append({"field": "cvv", "message": "CVV is required"})
    elif not validate_cvv(cvv):
        errors.append({"field": "cvv", "message": "Please enter a valid CVV (3 or 4 digits)"})

    return errors
