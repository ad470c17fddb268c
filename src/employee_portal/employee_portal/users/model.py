from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from ..core.enums import ProfileStatus, Role

# Optional employee columns accepted on create/update (everything beyond identity).
EMPLOYEE_DETAIL_FIELDS = (
    "position",
    "shift_type",
    "shift_start",
    "shift_end",
    "company_name",
    "work_location",
    "date_of_birth",
    "phone_number",
    "street_address",
    "city",
    "state",
    "zip_code",
    "country",
    "id_document_type",
    "id_document_number",
    "id_document_expiry",
    "id_document_url",
    "emergency_contact_name",
    "emergency_contact_phone",
    "hr_notes",
)

ID_DOCUMENT_TYPES = ("drivers_license", "passport", "state_id", "other")


@dataclass(frozen=True)
class Profile:
    user_id: str
    email: Optional[str]
    full_name: Optional[str]
    role: Role
    status: ProfileStatus = ProfileStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == ProfileStatus.ACTIVE


@dataclass(frozen=True)
class Employee:
    employee_id: str
    display_name: Optional[str]
    is_active: bool = True
    details: Dict[str, Any] = field(default_factory=dict)
    registered_device_id: Optional[str] = None
    device_name: Optional[str] = None
    device_registered_at: Optional[str] = None
    profile: Optional[Profile] = None

    @property
    def name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.profile and self.profile.full_name:
            return self.profile.full_name
        return "Employee"

    @property
    def email(self) -> Optional[str]:
        return self.profile.email if self.profile else None

    @property
    def position(self) -> Optional[str]:
        return self.details.get("position")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.employee_id,
            "display_name": self.display_name,
            "is_active": self.is_active,
            "registered_device_id": self.registered_device_id,
            "device_name": self.device_name,
            "device_registered_at": self.device_registered_at,
            **self.details,
        }
        if self.profile:
            p = asdict(self.profile)
            p["role"] = self.profile.role.value
            p["status"] = self.profile.status.value
            data["profile"] = p
        return data


@dataclass(frozen=True)
class SessionUser:
    """Authenticated caller resolved from an access token."""

    user_id: str
    email: Optional[str]
    full_name: Optional[str]
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.user_id, "email": self.email, "full_name": self.full_name, "role": self.role.value}
