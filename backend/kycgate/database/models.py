"""
backend/kycgate/database/models.py

Core SQLAlchemy ORM Model Registry

Imports every model so the declarative metadata is complete:
- Document: submitted identity evidence
- PersonalInfo: personal details step
- RoleProfile: per-role verification record
- UserSession: session context with the active role
- BusinessInfo, DriverInfo: role-specific details of merchants and drivers
"""

from kycgate.documents.models import Document
from kycgate.profiles.models import BusinessInfo, DriverInfo, PersonalInfo, RoleProfile
from kycgate.roles.models import UserSession

__all__ = ["BusinessInfo", "Document", "DriverInfo", "PersonalInfo", "RoleProfile", "UserSession"]
