from .validators import (
    FieldError,
    validate_email,
    validate_password,
    validate_card_number,
    validate_expiry_date,
    validate_cvv,
    validate_phone_number,
    validate_zip_code,
    validate_required,
    validate_min_length,
    validate_max_length,
    validate_numeric,
    validate_alphabetic,
    validate_alphanumeric,
    validate_field,
    validate_shipping_address,
    validate_payment_details,
)
