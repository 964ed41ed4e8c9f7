"""
Resolution: token in, public profile view out.

Self-contained tokens are decoded directly; anything that fails to decode is
looked up in the auxiliary store (legacy tokens).
"""
import logging
from typing import List, Optional

from ..core.errors import DecodeFailure
from ..models.profile import Profile, PublicProfileView
from ..models.records import AccidentLogEntry
from .aux_store import AuxiliaryStore
from .profile_codec import ProfileCodec, encode_phone, profile_codec

logger = logging.getLogger(__name__)


def build_public_view(profile: Profile) -> PublicProfileView:
    """Contact numbers are base64-encoded so they never appear as plain text."""
    return PublicProfileView(
        full_name=profile.full_name,
        blood_group=profile.blood_group,
        emergency_contacts=[
            {"name": c.name, "phoneEncoded": encode_phone(c.phone)}
            for c in profile.emergency_contacts
        ],
        government_helplines=[
            {"name": h.name, "number": h.phone} for h in profile.government_helplines
        ],
    )


class ResolutionService:

    def __init__(self, store: AuxiliaryStore, codec: Optional[ProfileCodec] = None):
        self.store = store
        self.codec = codec or profile_codec

    def lookup(self, token: str) -> Optional[Profile]:
        decoded = self.codec.decode(token)
        if not isinstance(decoded, DecodeFailure):
            return decoded
        logger.debug("Token %s... not self-contained (%s), trying store", token[:8], decoded.reason)
        return self.store.get_profile(token)

    def resolve(self, token: str) -> Optional[PublicProfileView]:
        profile = self.lookup(token)
        if profile is None:
            return None
        return build_public_view(profile)

    def log_location(
        self,
        token: str,
        latitude: Optional[float],
        longitude: Optional[float],
        maps_url: Optional[str],
    ) -> Optional[AccidentLogEntry]:
        """Record where a scanner found this person. None if the token is unknown."""
        profile = self.lookup(token)
        if profile is None:
            return None
        return self.store.append_accident_log(
            token=token,
            user_name=profile.full_name,
            latitude=latitude,
            longitude=longitude,
            maps_url=maps_url,
        )

    def recent_accident_logs(self, limit: int = 10) -> List[AccidentLogEntry]:
        return self.store.list_recent_accident_logs(limit)
