"""
Standard record schema (ENSIP-5) and value validation.

The schema is closed: one address record (``addr``), ten global text keys and
six service keys, 17 in total, in a fixed display order. Each key maps to one of
four display categories and, for a subset of keys, to a validation pattern.

Validation never raises. Empty values are always valid because every record is
optional; a key with no rule accepts anything.

Example
-------
    >>> validate_record("phone", "+14155551234").valid
    True
    >>> validate_records({"email": "nope"}).errors
    {'email': 'Invalid email format. Must be a valid email address.'}
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Pattern, Tuple, Union

from .errors import UnknownRecordKey


class RecordKey(str, Enum):
    ADDR = "addr"
    # global keys
    AVATAR = "avatar"
    DESCRIPTION = "description"
    DISPLAY = "display"
    EMAIL = "email"
    KEYWORDS = "keywords"
    MAIL = "mail"
    NOTICE = "notice"
    LOCATION = "location"
    PHONE = "phone"
    URL = "url"
    # service keys
    GITHUB = "com.github"
    PEEPETH = "com.peepeth"
    LINKEDIN = "com.linkedin"
    TWITTER = "com.twitter"
    KEYBASE = "io.keybase"
    TELEGRAM = "org.telegram"


class RecordCategory(str, Enum):
    PROFILE = "profile"
    CONTACT = "contact"
    SOCIAL = "social"
    OTHER = "other"


KeyLike = Union[RecordKey, str]

ADDRESS_KEY: RecordKey = RecordKey.ADDR

GLOBAL_KEYS: Tuple[RecordKey, ...] = (
    RecordKey.AVATAR,
    RecordKey.DESCRIPTION,
    RecordKey.DISPLAY,
    RecordKey.EMAIL,
    RecordKey.KEYWORDS,
    RecordKey.MAIL,
    RecordKey.NOTICE,
    RecordKey.LOCATION,
    RecordKey.PHONE,
    RecordKey.URL,
)

SERVICE_KEYS: Tuple[RecordKey, ...] = (
    RecordKey.GITHUB,
    RecordKey.PEEPETH,
    RecordKey.LINKEDIN,
    RecordKey.TWITTER,
    RecordKey.KEYBASE,
    RecordKey.TELEGRAM,
)

STANDARD_KEYS: Tuple[RecordKey, ...] = (ADDRESS_KEY, *GLOBAL_KEYS, *SERVICE_KEYS)

# Everything read through resolver.text()
TEXT_KEYS: Tuple[RecordKey, ...] = STANDARD_KEYS[1:]

FREE_TEXT_KEYS = frozenset(
    {
        RecordKey.DESCRIPTION,
        RecordKey.DISPLAY,
        RecordKey.KEYWORDS,
        RecordKey.MAIL,
        RecordKey.NOTICE,
        RecordKey.LOCATION,
        RecordKey.PEEPETH,
        RecordKey.LINKEDIN,
        RecordKey.KEYBASE,
    }
)

_HTTP_URL = re.compile(r"^https?://.+", re.IGNORECASE)
_HANDLE = re.compile(r"^[a-zA-Z0-9_]+$")

VALIDATION_RULES: Dict[RecordKey, Tuple[Pattern[str], str]] = {
    RecordKey.EMAIL: (
        re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
        "Invalid email format. Must be a valid email address.",
    ),
    RecordKey.PHONE: (
        re.compile(r"^\+[1-9][0-9]{1,14}$"),
        "Phone must be in E.164 format (e.g., +1234567890). Must start with + and country code.",
    ),
    RecordKey.URL: (_HTTP_URL, "URL must start with http:// or https://"),
    RecordKey.AVATAR: (_HTTP_URL, "Avatar URL must start with http:// or https://"),
    RecordKey.ADDR: (
        re.compile(r"^0x[a-fA-F0-9]{40}$"),
        "Invalid Ethereum address format. Must be 0x followed by 40 hexadecimal characters.",
    ),
    RecordKey.TWITTER: (
        _HANDLE,
        "Twitter username must contain only letters, numbers, and underscores (no @ symbol, no spaces).",
    ),
    RecordKey.TELEGRAM: (
        _HANDLE,
        "Telegram username must contain only letters, numbers, and underscores (no @ symbol, no spaces).",
    ),
    RecordKey.GITHUB: (
        re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]*$"),
        "GitHub username must start with alphanumeric character and can contain hyphens (no spaces, no @ symbol).",
    ),
}

RECORD_LABELS: Dict[RecordKey, str] = {
    RecordKey.ADDR: "Address",
    RecordKey.AVATAR: "Avatar URL",
    RecordKey.DESCRIPTION: "Description",
    RecordKey.DISPLAY: "Display Name",
    RecordKey.EMAIL: "Email",
    RecordKey.KEYWORDS: "Keywords",
    RecordKey.MAIL: "Mailing Address",
    RecordKey.NOTICE: "Notice",
    RecordKey.LOCATION: "Location",
    RecordKey.PHONE: "Phone",
    RecordKey.URL: "Website URL",
    RecordKey.GITHUB: "GitHub",
    RecordKey.PEEPETH: "Peepeth",
    RecordKey.LINKEDIN: "LinkedIn",
    RecordKey.TWITTER: "Twitter/X",
    RecordKey.KEYBASE: "Keybase",
    RecordKey.TELEGRAM: "Telegram",
}

_PROFILE_KEYS = frozenset({RecordKey.AVATAR, RecordKey.DISPLAY, RecordKey.KEYWORDS})
_CONTACT_KEYS = frozenset({RecordKey.EMAIL, RecordKey.PHONE, RecordKey.LOCATION})
_SOCIAL_PREFIXES = ("com.", "org.", "io.")


# --------------------------------------------------------------------------- keys


def _as_key(key: KeyLike) -> Optional[RecordKey]:
    if isinstance(key, RecordKey):
        return key
    try:
        return RecordKey(key)
    except ValueError:
        return None


def parse_record_key(key: KeyLike) -> RecordKey:
    """Strict lookup into the standard key set."""
    k = _as_key(key)
    if k is None:
        raise UnknownRecordKey(str(key))
    return k


def is_standard_key(key: KeyLike) -> bool:
    return _as_key(key) is not None


def _key_str(key: KeyLike) -> str:
    return key.value if isinstance(key, RecordKey) else str(key)


# --------------------------------------------------------------------- validation


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {"valid": self.valid}
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class RecordsValidation:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, object]:
        return {"valid": self.valid, "errors": dict(self.errors)}


_VALID = ValidationResult(True)


def validate_record(key: KeyLike, value: Optional[str]) -> ValidationResult:
    """Validate one record value for *key*."""
    if value is None or not value.strip():
        return _VALID

    k = _as_key(key)
    if k is None or k in FREE_TEXT_KEYS:
        return _VALID

    rule = VALIDATION_RULES.get(k)
    if rule is None:
        return _VALID

    pattern, message = rule
    if pattern.match(value.strip()):
        return _VALID
    return ValidationResult(False, message)


def validate_records(records: Mapping[KeyLike, Optional[str]]) -> RecordsValidation:
    """Validate every entry of *records*; collects one message per failing key."""
    errors: Dict[str, str] = {}
    for key, value in records.items():
        res = validate_record(key, value)
        if not res.valid and res.error:
            errors[_key_str(key)] = res.error
    return RecordsValidation(errors)


# --------------------------------------------------------------------- categories


def get_record_category(key: KeyLike) -> RecordCategory:
    k = _as_key(key)
    if k in _PROFILE_KEYS:
        return RecordCategory.PROFILE
    if k in _CONTACT_KEYS:
        return RecordCategory.CONTACT
    if _key_str(key).startswith(_SOCIAL_PREFIXES):
        return RecordCategory.SOCIAL
    return RecordCategory.OTHER


def get_records_by_category() -> Dict[RecordCategory, List[RecordKey]]:
    """The 16 text keys grouped by category, canonical order kept within each group."""
    groups: Dict[RecordCategory, List[RecordKey]] = {c: [] for c in RecordCategory}
    for key in TEXT_KEYS:
        groups[get_record_category(key)].append(key)
    return groups


def get_record_label(key: KeyLike) -> str:
    k = _as_key(key)
    if k is None:
        return _key_str(key)
    return RECORD_LABELS[k]


__all__ = [
    "RecordKey",
    "RecordCategory",
    "ADDRESS_KEY",
    "GLOBAL_KEYS",
    "SERVICE_KEYS",
    "STANDARD_KEYS",
    "TEXT_KEYS",
    "FREE_TEXT_KEYS",
    "VALIDATION_RULES",
    "ValidationResult",
    "RecordsValidation",
    "parse_record_key",
    "is_standard_key",
    "validate_record",
    "validate_records",
    "get_record_category",
    "get_records_by_category",
    "get_record_label",
]
