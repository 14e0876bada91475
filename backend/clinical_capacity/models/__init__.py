"""ORM models package export."""

from clinical_capacity.models.agency import Agency, AgencyType
from clinical_capacity.models.clinical_site import ClinicalSite
from clinical_capacity.models.placement import (
    INACTIVE_INTERNSHIP_STATUSES,
    ClinicalSiteVisit,
    InternshipStatus,
    StudentInternship,
)
from clinical_capacity.models.user import User, UserRole, UserStatus

__all__ = [
    "Agency",
    "AgencyType",
    "ClinicalSite",
    "ClinicalSiteVisit",
    "INACTIVE_INTERNSHIP_STATUSES",
    "InternshipStatus",
    "StudentInternship",
    "User",
    "UserRole",
    "UserStatus",
]
