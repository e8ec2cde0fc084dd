"""
Form validators.

Two flavours per field:
- is_*: boolean predicate
- *_validator: returns a user-facing message, or None when the value is valid
"""

import re
from typing import Optional

from .formatters import fixed

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$",
    re.IGNORECASE,
)
# At least 8 chars with upper, lower, digit and one of @$!%*?&
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
)
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,20}$")
HASHTAG_PATTERN = re.compile(r"^#[a-zA-Z0-9_]{1,29}$")

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


# =============================================================================
# Account fields
# =============================================================================

def is_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return EMAIL_PATTERN.match(value.strip()) is not None


def email_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Email is required"
    if not is_email(value):
        return "Please enter a valid email address"
    return None


def is_strong_password(value: Optional[str]) -> bool:
    if not value:
        return False
    return PASSWORD_PATTERN.match(value) is not None


def password_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Password is required"
    if len(value) < 8:
        return "Password must be at least 8 characters long"
    if not is_strong_password(value):
        return "Password must include uppercase, lowercase, number, and special character"
    return None


def confirm_password_validator(
    value: Optional[str], original_password: Optional[str]
) -> Optional[str]:
    if not value:
        return "Please confirm your password"
    if value != original_password:
        return "Passwords do not match"
    return None


def is_valid_username(value: Optional[str]) -> bool:
    if not value:
        return False
    return USERNAME_PATTERN.match(value) is not None


def username_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Username is required"
    if len(value) < 3:
        return "Username must be at least 3 characters long"
    if len(value) > 20:
        return "Username must be less than 20 characters"
    if not is_valid_username(value):
        return "Username can only contain letters, numbers, and underscores"
    return None


def is_valid_display_name(value: Optional[str]) -> bool:
    if not value:
        return False
    return 2 <= len(value) <= 30


def display_name_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Display name is required"
    if len(value) < 2:
        return "Display name must be at least 2 characters long"
    if len(value) > 30:
        return "Display name must be less than 30 characters"
    return None


# =============================================================================
# Creative fields
# =============================================================================

def is_valid_challenge_title(value: Optional[str]) -> bool:
    if not value:
        return False
    return 5 <= len(value) <= 100


def challenge_title_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Challenge title is required"
    if len(value) < 5:
        return "Title must be at least 5 characters long"
    if len(value) > 100:
        return "Title must be less than 100 characters"
    return None


def is_valid_challenge_description(value: Optional[str]) -> bool:
    # Optional field
    if value is None:
        return True
    return len(value) <= 500


def challenge_description_validator(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > 500:
        return "Description must be less than 500 characters"
    return None


def is_valid_creative_content(value: Optional[str]) -> bool:
    if not value:
        return False
    return 10 <= len(value) <= 2000


def creative_content_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Content is required"
    if len(value) < 10:
        return "Content must be at least 10 characters long"
    if len(value) > 2000:
        return "Content must be less than 2000 characters"
    return None


def is_valid_hashtag(value: Optional[str]) -> bool:
    if not value:
        return False
    return HASHTAG_PATTERN.match(value) is not None


def hashtag_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Hashtag is required"
    if not is_valid_hashtag(value):
        return "Hashtag must start with # and contain only letters, numbers, and underscores"
    return None


def is_valid_ai_prompt(value: Optional[str]) -> bool:
    if not value:
        return False
    return 5 <= len(value) <= 1000


def ai_prompt_validator(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Prompt is required"
    if len(value) < 5:
        return "Prompt must be at least 5 characters long"
    if len(value) > 1000:
        return "Prompt must be less than 1000 characters"
    return None


def is_valid_file_size(file_size: int, max_size: int = DEFAULT_MAX_FILE_SIZE) -> bool:
    return file_size <= max_size


def file_size_validator(file_size: int, max_size: int = DEFAULT_MAX_FILE_SIZE) -> Optional[str]:
    if not is_valid_file_size(file_size, max_size):
        return f"File size must be less than {fixed(max_size / (1024 * 1024), 0)}MB"
    return None


# =============================================================================
# Whole forms
# =============================================================================

def validate_signup(
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
    username: Optional[str],
    display_name: Optional[str],
) -> dict[str, Optional[str]]:
    """Validate every signup field. Keys match the form field names."""
    return {
        "email": email_validator(email),
        "password": password_validator(password),
        "confirmPassword": confirm_password_validator(confirm_password, password),
        "username": username_validator(username),
        "displayName": display_name_validator(display_name),
    }


def is_form_valid(validations: dict[str, Optional[str]]) -> bool:
    return all(error is None for error in validations.values())
