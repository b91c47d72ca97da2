"""Database layer for PostgreSQL operations."""

from src.db.audit_logs.model import AuditLog
from src.db.config import DatabaseSettings, get_db_settings
from src.db.credentials.model import TenantCredentials
from src.db.database import Base, get_db
from src.db.feature_flags.model import FeatureFlag
from src.db.phone_numbers.model import PhoneNumber
from src.db.profiles.model import ConfigurationProfile
from src.db.tenants.model import CustomerTenant

__all__ = [
    "AuditLog",
    "Base",
    "ConfigurationProfile",
    "CustomerTenant",
    "DatabaseSettings",
    "FeatureFlag",
    "PhoneNumber",
    "TenantCredentials",
    "get_db",
    "get_db_settings",
]
