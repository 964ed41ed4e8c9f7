"""
Emergency profile: the data carried inside a self-contained token.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Contact:
    """A named phone number. Used for both emergency contacts and helplines."""
    name: str
    phone: str  # digits only after registration


@dataclass(frozen=True)
class Profile:
    full_name: str
    blood_group: str                          # upper-cased, e.g. "B+"
    emergency_contacts: Tuple[Contact, ...]   # display order
    government_helplines: Tuple[Contact, ...]
    created_at: datetime                      # UTC, millisecond precision

    def __post_init__(self):
        # tokens carry epoch milliseconds, so anything finer would not round-trip
        if self.created_at.microsecond % 1000:
            object.__setattr__(
                self,
                "created_at",
                self.created_at.replace(microsecond=self.created_at.microsecond // 1000 * 1000),
            )

    def to_record(self) -> Dict:
        """Plain JSON-able form used for store snapshots (camelCase keys)."""
        return {
            "fullName": self.full_name,
            "bloodGroup": self.blood_group,
            "emergencyContacts": [{"name": c.name, "phone": c.phone} for c in self.emergency_contacts],
            "governmentHelplines": [{"name": h.name, "number": h.phone} for h in self.government_helplines],
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict) -> "Profile":
        return cls(
            full_name=record["fullName"],
            blood_group=record["bloodGroup"],
            emergency_contacts=tuple(
                Contact(name=c["name"], phone=c["phone"]) for c in record["emergencyContacts"]
            ),
            government_helplines=tuple(
                Contact(name=h["name"], phone=h.get("number", h.get("phone", "")))
                for h in record["governmentHelplines"]
            ),
            created_at=datetime.fromisoformat(record["createdAt"]),
        )


@dataclass(frozen=True)
class PublicProfileView:
    """What a scanner is allowed to see. Contact numbers are base64-encoded."""
    full_name: str
    blood_group: str
    emergency_contacts: List[Dict[str, str]]    # [{"name", "phoneEncoded"}]
    government_helplines: List[Dict[str, str]]  # [{"name", "number"}]

    def to_dict(self) -> Dict:
        return {
            "fullName": self.full_name,
            "bloodGroup": self.blood_group,
            "emergencyContacts": self.emergency_contacts,
            "governmentHelplines": self.government_helplines,
        }
