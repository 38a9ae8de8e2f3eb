from __future__ import annotations
import secrets
from conduit.config import Settings

def constant_time_equals(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))

def tenant_for_key(settings: Settings, provided: str | None) -> str | None:
    """Tenant id owning the API key, or None. Tenants without a key can't be addressed."""
    if not provided:
        return None
    for tenant_id, tenant in settings.tenants.items():
        if tenant.api_key and constant_time_equals(tenant.api_key, provided):
            return tenant_id
    return None
