"""Contact domain entity (read-only to the dispatch core)."""
import uuid
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


@dataclass
class Contact:
    """A stored addressee owned by a user."""

    owner_id: str
    name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    groups: List[str] = field(default_factory=lambda: ["All"])
    is_active: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        """Validate contact entity."""
        if not self.owner_id:
            raise ValueError("owner_id is required")
        if not self.phone_number and not self.email:
            raise ValueError("Phone number or email is required")
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone_number:
            self.phone_number = self.phone_number.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.owner_id,
            "name": self.name,
            "phoneNumber": self.phone_number,
            "email": self.email,
            "groups": list(self.groups),
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        return cls(
            id=data["id"],
            owner_id=data["userId"],
            name=data.get("name", ""),
            phone_number=data.get("phoneNumber"),
            email=data.get("email"),
            groups=data.get("groups") or ["All"],
            is_active=data.get("isActive", True),
        )
