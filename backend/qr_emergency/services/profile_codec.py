"""
Self-contained token codec.

A token is the URL-safe base64 (padding stripped) of a compact UTF-8 JSON
object with short keys:

    {"n": full name, "b": blood group,
     "e": [{"n": name, "p": phone}, ...],   emergency contacts, in order
     "g": [{"n": name, "p": phone}, ...],   government helplines, in order
     "t": creation time in epoch milliseconds}

No server-side state is needed to resolve such a token. Tokens that do not
decode (legacy 32-char hex tokens, truncated copies, hand-edited text) yield a
``DecodeFailure`` and are resolved through the auxiliary store instead.
"""
import base64
import binascii
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, List, Tuple, Union

from ..core.errors import DecodeFailure
from ..models.profile import Contact, Profile

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_URLSAFE_ALPHABET = re.compile(r"^[A-Za-z0-9_-]+$")
_LEGACY_TOKEN = re.compile(r"^[0-9a-f]{32}$")


def _to_epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def _from_epoch_ms(value: int) -> datetime:
    return EPOCH + timedelta(milliseconds=value)


def encode_phone(digits: str) -> str:
    """Standard base64 of a phone number, as decoded by the scan page's ``atob``."""
    return base64.b64encode(digits.encode("utf-8")).decode("ascii")


class ProfileCodec:
    """Encodes a Profile into a token and back."""

    def encode(self, profile: Profile) -> str:
        payload = {
            "n": profile.full_name,
            "b": profile.blood_group,
            "e": [{"n": c.name, "p": c.phone} for c in profile.emergency_contacts],
            "g": [{"n": h.name, "p": h.phone} for h in profile.government_helplines],
            "t": _to_epoch_ms(profile.created_at),
        }
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")

    def decode(self, token: str) -> Union[Profile, DecodeFailure]:
        """Decode a token. Never raises; malformed input gives a DecodeFailure."""
        if not isinstance(token, str) or not token:
            return DecodeFailure("empty token")
        if not _URLSAFE_ALPHABET.match(token):
            return DecodeFailure("invalid characters")
        if len(token) % 4 == 1:
            return DecodeFailure("truncated token")

        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError):
            return DecodeFailure("invalid base64")

        try:
            payload = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError:
            return DecodeFailure("payload is not utf-8")
        except (ValueError, RecursionError):
            return DecodeFailure("payload is not json")

        if not isinstance(payload, dict):
            return DecodeFailure("payload is not an object")

        full_name = payload.get("n")
        blood_group = payload.get("b")
        if not _non_empty_text(full_name) or not _non_empty_text(blood_group):
            return DecodeFailure("missing name or blood group")

        contacts = _contacts(payload.get("e"))
        if contacts is None:
            return DecodeFailure("invalid emergency contacts")
        helplines = _contacts(payload.get("g"))
        if helplines is None:
            return DecodeFailure("invalid government helplines")

        created = payload.get("t")
        if isinstance(created, bool) or not isinstance(created, int):
            return DecodeFailure("invalid timestamp")
        try:
            created_at = _from_epoch_ms(created)
        except OverflowError:
            return DecodeFailure("invalid timestamp")

        return Profile(
            full_name=full_name,
            blood_group=blood_group,
            emergency_contacts=contacts,
            government_helplines=helplines,
            created_at=created_at,
        )

    @staticmethod
    def is_legacy_token(token: str) -> bool:
        return isinstance(token, str) and bool(_LEGACY_TOKEN.match(token))


def _non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _contacts(items: Any) -> Union[Tuple[Contact, ...], None]:
    if not isinstance(items, list) or not items:
        return None
    contacts: List[Contact] = []
    for item in items:
        if not isinstance(item, dict):
            return None
        name, phone = item.get("n"), item.get("p")
        if not _non_empty_text(name) or not isinstance(phone, str):
            return None
        contacts.append(Contact(name=name, phone=phone))
    return tuple(contacts)


profile_codec = ProfileCodec()
