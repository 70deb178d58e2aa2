"""Checks for the identity fields of a registration form.

All checks in this module are pure: they inspect their argument and return
a verdict without touching the filesystem or the network.
"""

import logging
import re
from datetime import date, datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from ..core.errors import ParseError

logger = logging.getLogger(__name__)

# "+", a 1-3 digit country code, an optional single space, 4-14 digits.
PHONE_NUMBER_PATTERN = re.compile(r"\+[0-9]{1,3} ?[0-9]{4,14}")

DEFAULT_MINIMUM_AGE = 18
DEFAULT_PASSWORD_MIN_LENGTH = 8


def is_valid_email(email: str) -> bool:
    """Checks whether an email address is syntactically valid.

    Validation is delegated to the `email-validator` library. Deliverability
    (DNS) checks are disabled, so the call never performs network I/O.

    Args:
        email (str): The address to check.

    Returns:
        bool: True if the address is well formed.
    """
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        logger.debug(f"Rejected email {email!r}: {e}")
        return False
    return True


def is_valid_password(password: str, min_length: int = DEFAULT_PASSWORD_MIN_LENGTH) -> bool:
    """Checks that a password has at least `min_length` characters."""
    return len(password) >= min_length


def is_valid_phone_number(phone_number: str) -> bool:
    """Checks that a phone number is in international format.

    Accepted: a leading "+", a 1-3 digit country code, an optional single
    space, then 4-14 digits. Parentheses, dashes and extensions are rejected.

    Args:
        phone_number (str): The number to check, e.g. "+44 2071838750".

    Returns:
        bool: True if the whole string matches the format.
    """
    return PHONE_NUMBER_PATTERN.fullmatch(phone_number) is not None


def parse_birth_date(date_text: str) -> date:
    """Parses an ISO 8601 date (or date-time) string into a `date`.

    Args:
        date_text (str): The text to parse, e.g. "2000-01-31".

    Returns:
        date: The calendar date; any time part is discarded.

    Raises:
        ParseError: If the text is not a valid ISO date.
    """
    if not isinstance(date_text, str):
        raise ParseError(f"Expected a date string, got {type(date_text).__name__}")
    try:
        # fromisoformat only accepts a 'Z' suffix from Python 3.11 onwards.
        return datetime.fromisoformat(date_text.strip().replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ParseError(f"Could not parse date of birth {date_text!r}: {e}") from e


def calculate_age(birth_date: date, today: date) -> int:
    """Returns the age in whole years on `today` of someone born on `birth_date`."""
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def is_age_valid(date_text: str, minimum_age: int = DEFAULT_MINIMUM_AGE, today: Optional[date] = None) -> bool:
    """Checks that a person is at least `minimum_age` years old.

    The age is computed against the current date at call time unless
    `today` is given, so the verdict for a fixed birthdate changes over time.
    A birthdate in the future is never valid.

    Args:
        date_text (str): The date of birth in ISO format.
        minimum_age (int): The required age in whole years. Defaults to 18.
        today (Optional[date]): The reference date. Defaults to today.

    Returns:
        bool: True if the person has reached `minimum_age`.

    Raises:
        ParseError: If `date_text` is not a valid date.
    """
    birth_date = parse_birth_date(date_text)
    today = today or date.today()
    if birth_date > today:
        logger.debug(f"Date of birth {birth_date} lies in the future")
        return False
    return calculate_age(birth_date, today) >= minimum_age
