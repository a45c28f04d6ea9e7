"""
Form validation, run before anything is dispatched.

Validation errors never reach the Effect Coordinator: the caller gets a
ValidationError immediately and the store is left untouched.
"""

from store.models import ContactForm, TradingSettings

MIN_PASSWORD_LENGTH = 6


class ValidationError(ValueError):
    """Invalid user input. ``field`` names the offending input."""

    def __init__(self, field, message):
        self.field = field
        self.message = message
        super().__init__(message)


def _require(value, field, message):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, message)
    return value.strip()


def validate_email(email) -> str:
    email = _require(email, "email", "Please enter your email address")
    if "@" not in email or "." not in email:
        raise ValidationError("email", "Please enter a valid email address")
    return email


def validate_login(email, password):
    email = _require(email, "email", "Please enter your email address")
    if not password:
        raise ValidationError("password", "Please enter your password")
    return email, password


def validate_registration(name, email, password, confirm_password):
    name = _require(name, "name", "Please enter your full name")
    email = _require(email, "email", "Please enter your email address")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if password != confirm_password:
        raise ValidationError("confirm_password", "Passwords do not match")
    return name, email, password


def validate_forgot_password(email) -> str:
    return validate_email(email)


def validate_contact_form(name, email, subject, message) -> ContactForm:
    fields = {"name": name, "email": email, "subject": subject, "message": message}
    for field, value in fields.items():
        _require(value, field, "Please fill in all fields")
    return ContactForm(
        name=name.strip(),
        email=email.strip(),
        subject=subject.strip(),
        message=message.strip(),
    )


def validate_settings(settings: TradingSettings) -> TradingSettings:
    if settings.default_amount <= 0:
        raise ValidationError("default_amount", "Default amount must be positive")
    if settings.max_daily_loss <= 0:
        raise ValidationError("max_daily_loss", "Max daily loss must be positive")
    if settings.max_daily_trades <= 0:
        raise ValidationError("max_daily_trades", "Max daily trades must be positive")
    if not 0 <= settings.min_confidence <= 100:
        raise ValidationError("min_confidence", "Minimum confidence must be between 0 and 100")
    if settings.martingale and settings.martingale_multiplier <= 1:
        raise ValidationError("martingale_multiplier", "Martingale multiplier must be greater than 1")
    return settings
