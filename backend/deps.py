"""Request dependencies: overridable in tests via ``app.dependency_overrides``."""

from functools import lru_cache

from fastapi import Depends

from aura.audit import AuditClient, AuditOrchestrator
from aura.config import Settings, get_settings
from aura.store import StoreRepository, get_store


@lru_cache
def settings_dep() -> Settings:
    return get_settings()


def store_dep() -> StoreRepository:
    return get_store()


def audit_client_dep(settings: Settings = Depends(settings_dep)) -> AuditClient:
    return AuditClient.from_settings(settings)


def orchestrator_dep(
    store: StoreRepository = Depends(store_dep),
    client: AuditClient = Depends(audit_client_dep),
    settings: Settings = Depends(settings_dep),
) -> AuditOrchestrator:
    return AuditOrchestrator(store, client, max_flags=settings.aura_audit_max_flags)
