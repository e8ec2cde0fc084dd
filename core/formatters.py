"""
Display formatters for counts, dates and user text.

All functions are pure. Date helpers take an optional `now` so callers
(and tests) can pin the reference time.
"""

import re
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Text
# =============================================================================

def shorten(text: str, max_length: int = 50) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}…"


def capitalize(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:].lower()


def capitalize_words(text: str) -> str:
    return " ".join(capitalize(word) for word in text.split(" "))


def format_hashtag(tag: str) -> str:
    return tag if tag.startswith("#") else f"#{tag}"


def format_username(username: str) -> str:
    return username if username.startswith("@") else f"@{username}"


def format_prompt(prompt: str) -> str:
    """Trim a prompt and collapse internal whitespace runs to one space."""
    return _WHITESPACE.sub(" ", prompt.strip())


# =============================================================================
# Numbers
# =============================================================================

def fixed(value: float, digits: int) -> str:
    """Fixed-point text with halves rounded away from zero (1.25 -> "1.3")."""
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_number(number: int) -> str:
    if number < 1000:
        return str(number)
    if number < 1_000_000:
        return f"{fixed(number / 1000, 1)}K"
    return f"{fixed(number / 1_000_000, 1)}M"


def format_likes(likes: int) -> str:
    """Like format_number, but drops the decimal between 10K and 1M."""
    if likes < 1000:
        return str(likes)
    if likes < 10_000:
        return f"{fixed(likes / 1000, 1)}K"
    if likes < 1_000_000:
        return f"{fixed(likes / 1000, 0)}K"
    return f"{fixed(likes / 1_000_000, 1)}M"


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1_048_576:
        return f"{fixed(size_bytes / 1024, 1)} KB"
    return f"{fixed(size_bytes / 1_048_576, 1)} MB"


def format_streak(streak: int) -> str:
    return "1 day" if streak == 1 else f"{streak} days"


# =============================================================================
# Dates
# =============================================================================

def format_time_ago(date: datetime, now: Optional[datetime] = None) -> str:
    """
    Relative age of a timestamp.

    < 1 minute  -> "Just now"
    < 1 hour    -> "5m ago"
    < 1 day     -> "3h ago"
    < 1 week    -> "2d ago"
    < 30 days   -> "3w ago"
    otherwise   -> "4mo ago"
    """
    now = now or datetime.now(date.tzinfo)
    seconds = int((now - date).total_seconds())

    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    return f"{days // 30}mo ago"


def format_challenge_date(date: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(date.tzinfo)
    today = now.date()
    day = date.date()

    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{date.day}/{date.month}/{date.year}"
