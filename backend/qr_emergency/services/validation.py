"""
Registration input validation.

Raw request bodies are checked in a fixed order (first failure wins) and turned
into a typed ``Profile``. Nothing downstream of this module sees untyped input.
"""
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from ..core.errors import ProfileValidationError
from ..models.base import utcnow_ms
from ..models.profile import Contact, Profile

MISSING_FIELDS = "Missing required fields. सभी जानकारी आवश्यक है।"
NO_EMERGENCY_CONTACTS = (
    "At least one emergency contact is required. कम से कम एक आपातकालीन संपर्क आवश्यक है।"
)
NO_GOVERNMENT_HELPLINES = (
    "At least one government helpline is required. कम से कम एक सरकारी हेल्पलाइन आवश्यक है।"
)
INVALID_EMERGENCY_CONTACT = "Invalid emergency contact information. अमान्य आपातकालीन संपर्क जानकारी।"
INVALID_GOVERNMENT_HELPLINE = (
    "Invalid government helpline information. अमान्य सरकारी हेल्पलाइन जानकारी।"
)

_NON_DIGITS = re.compile(r"\D")


class PhoneValidation:
    PERMISSIVE = "permissive"
    STRICT = "strict"

    ALL = [PERMISSIVE, STRICT]


def clean_phone_number(phone: str) -> str:
    """Strip everything but digits."""
    return _NON_DIGITS.sub("", phone)


@dataclass(frozen=True)
class PhonePolicy:
    """Phone validity rule applied to contacts and helplines alike.

    permissive: any non-empty value that contains at least one digit.
    strict: between ``min_digits`` and ``max_digits`` digits after cleaning.
    """
    mode: str = PhoneValidation.PERMISSIVE
    min_digits: int = 10
    max_digits: int = 13

    def __post_init__(self):
        if self.mode not in PhoneValidation.ALL:
            raise ValueError(f"Unknown phone validation mode: {self.mode!r}")

    @classmethod
    def from_settings(cls, settings) -> "PhonePolicy":
        return cls(
            mode=settings.PHONE_VALIDATION.lower(),
            min_digits=settings.PHONE_MIN_DIGITS,
            max_digits=settings.PHONE_MAX_DIGITS,
        )

    def is_valid(self, phone: str) -> bool:
        digits = clean_phone_number(phone)
        if self.mode == PhoneValidation.STRICT:
            return self.min_digits <= len(digits) <= self.max_digits
        return len(digits) > 0


def _text(value: Any) -> str:
    """Trimmed text for str/int input, empty string for anything else.

    Strings that cannot be encoded as UTF-8 (lone surrogates from JSON escapes)
    count as missing.
    """
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return ""
        return value.strip()
    return ""


def _entries(
    items: List[Any], phone_keys: Tuple[str, ...], policy: PhonePolicy, message: str
) -> Tuple[Contact, ...]:
    contacts = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ProfileValidationError(message)
        name = _text(item.get("name"))
        phone = next((_text(item.get(k)) for k in phone_keys if _text(item.get(k))), "")
        if not name or not phone or not policy.is_valid(phone):
            raise ProfileValidationError(message)
        contacts.append(Contact(name=name, phone=clean_phone_number(phone)))
    return tuple(contacts)


def validate_registration(raw: Any, policy: Optional[PhonePolicy] = None) -> Profile:
    """Validate a registration body and build a normalized Profile.

    Raises ProfileValidationError with one of the module-level messages.
    """
    policy = policy or PhonePolicy()
    if not isinstance(raw, Mapping):
        raise ProfileValidationError(MISSING_FIELDS)

    full_name = _text(raw.get("fullName"))
    blood_group = _text(raw.get("bloodGroup"))
    if not full_name or not blood_group:
        raise ProfileValidationError(MISSING_FIELDS)

    contacts = raw.get("emergencyContacts")
    if not isinstance(contacts, list) or len(contacts) == 0:
        raise ProfileValidationError(NO_EMERGENCY_CONTACTS)

    helplines = raw.get("governmentHelplines")
    if not isinstance(helplines, list) or len(helplines) == 0:
        raise ProfileValidationError(NO_GOVERNMENT_HELPLINES)

    return Profile(
        full_name=full_name,
        blood_group=blood_group.upper(),
        emergency_contacts=_entries(contacts, ("phone",), policy, INVALID_EMERGENCY_CONTACT),
        # helplines historically use "number"; accept "phone" too
        government_helplines=_entries(
            helplines, ("number", "phone"), policy, INVALID_GOVERNMENT_HELPLINE
        ),
        created_at=utcnow_ms(),
    )
