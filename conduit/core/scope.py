"""Per-tenant lazy instantiation of shared services."""
from __future__ import annotations

import abc
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class TenantScopeCache(abc.ABC, Generic[T]):
    """Holds at most one scope instance per tenant.

    Scopes are created on first access and kept for the lifetime of the cache.
    Creation is single-flight per tenant id: concurrent first accesses run the
    factory once and all observe the same instance. A factory failure is not
    cached, so the next access retries.
    """

    def __init__(self) -> None:
        self._scopes: dict[str, T] = {}
        self._guard = threading.Lock()
        self._creation_locks: dict[str, threading.Lock] = {}

    def for_tenant(self, tenant_id: str) -> T:
        if tenant_id in self._scopes:
            return self._scopes[tenant_id]

        with self._guard:
            lock = self._creation_locks.setdefault(tenant_id, threading.Lock())

        with lock:
            if tenant_id not in self._scopes:
                self._scopes[tenant_id] = self.create_scope(tenant_id)
            return self._scopes[tenant_id]

    def tenants(self) -> list[str]:
        return list(self._scopes)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._scopes

    @abc.abstractmethod
    def create_scope(self, tenant_id: str) -> T:
        ...


class ScopeCache(TenantScopeCache[T]):
    """TenantScopeCache built from a plain factory callable."""

    def __init__(self, factory: Callable[[str], T]):
        super().__init__()
        self._factory = factory

    def create_scope(self, tenant_id: str) -> T:
        return self._factory(tenant_id)
