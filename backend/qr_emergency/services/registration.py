"""
Registration: validated profile in, self-contained token out.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..models.profile import Profile
from .aux_store import AuxiliaryStore
from .profile_codec import ProfileCodec, profile_codec
from .validation import PhonePolicy, validate_registration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    token: str
    public_url: str      # relative scan page URL
    qr_image_url: str    # relative QR image URL
    profile: Profile

    def to_dict(self) -> dict:
        return {"token": self.token, "publicUrl": self.public_url, "qrImageUrl": self.qr_image_url}


def scan_path(token: str) -> str:
    return f"/scan/{token}"


def qr_image_path(token: str) -> str:
    return f"/api/qr/{token}"


class RegistrationService:
    """Validates inbound profiles and issues tokens.

    With ``mirror_to_store`` the profile is also written to the auxiliary store
    under its token, so store-based lookups keep working for old clients.
    """

    def __init__(
        self,
        store: AuxiliaryStore,
        codec: Optional[ProfileCodec] = None,
        phone_policy: Optional[PhonePolicy] = None,
        mirror_to_store: bool = False,
    ):
        self.store = store
        self.codec = codec or profile_codec
        self.phone_policy = phone_policy or PhonePolicy()
        self.mirror_to_store = mirror_to_store

    def register(self, raw: Any) -> RegistrationResult:
        """Raises ProfileValidationError on invalid input."""
        profile = validate_registration(raw, self.phone_policy)
        token = self.codec.encode(profile)

        if self.mirror_to_store:
            self.store.put_profile(token, profile)

        logger.info(
            "Registered %s with %d contacts and %d helplines (token %s...)",
            profile.full_name,
            len(profile.emergency_contacts),
            len(profile.government_helplines),
            token[:8],
        )
        return RegistrationResult(
            token=token,
            public_url=scan_path(token),
            qr_image_url=qr_image_path(token),
            profile=profile,
        )
