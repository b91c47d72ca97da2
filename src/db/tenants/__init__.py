from src.db.tenants.model import CustomerTenant
from src.db.tenants.repository import TenantRepository

__all__ = ["CustomerTenant", "TenantRepository"]
