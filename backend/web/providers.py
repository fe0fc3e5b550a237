"""
Process-wide adapter registry used by the HTTP routes.

Why:
    Routes build use cases per request from the currently wired adapters.
    Startup wiring (or tests) inject concrete adapters via the ``set_*``
    functions; until then Null adapters raise ConfigurationError, which the
    routes surface as 500.
"""
from __future__ import annotations

from dataclasses import dataclass

from backend.accounts.mailer import InMemoryMailer, Mailer, NullMailer
from backend.datastore.memory import InMemoryTableStore
from backend.datastore.ports import NullTableStore, TableStore
from backend.identity_access.memory import InMemoryIdentityProvider
from backend.identity_access.ports import IdentityProvider, NullIdentityProvider
from backend.storage.memory import InMemoryObjectStorage
from backend.storage.ports import NullStorageAdapter, ObjectStorage

TABLE_STORE: TableStore = NullTableStore()
STORAGE_ADAPTER: ObjectStorage = NullStorageAdapter()
IDENTITY_PROVIDER: IdentityProvider = NullIdentityProvider()
MAILER: Mailer = NullMailer()


def set_table_store(store: TableStore) -> None:
    global TABLE_STORE
    TABLE_STORE = store


def set_storage_adapter(adapter: ObjectStorage) -> None:
    """Inject storage adapter (e.g., Supabase) for proof and thumbnail uploads."""
    global STORAGE_ADAPTER
    STORAGE_ADAPTER = adapter


def set_identity_provider(provider: IdentityProvider) -> None:
    global IDENTITY_PROVIDER
    IDENTITY_PROVIDER = provider


def set_mailer(mailer: Mailer) -> None:
    global MAILER
    MAILER = mailer


def get_table_store() -> TableStore:
    return TABLE_STORE


def get_storage_adapter() -> ObjectStorage:
    return STORAGE_ADAPTER


def get_identity_provider() -> IdentityProvider:
    return IDENTITY_PROVIDER


def get_mailer() -> Mailer:
    return MAILER


@dataclass
class InMemoryBackends:
    store: InMemoryTableStore
    storage: InMemoryObjectStorage
    identity: InMemoryIdentityProvider
    mailer: InMemoryMailer


def use_in_memory_backends() -> InMemoryBackends:
    """Wire fresh in-memory adapters and return them (local dev and tests)."""
    backends = InMemoryBackends(
        store=InMemoryTableStore(),
        storage=InMemoryObjectStorage(),
        identity=InMemoryIdentityProvider(),
        mailer=InMemoryMailer(),
    )
    set_table_store(backends.store)
    set_storage_adapter(backends.storage)
    set_identity_provider(backends.identity)
    set_mailer(backends.mailer)
    return backends


def reset_to_null() -> None:
    set_table_store(NullTableStore())
    set_storage_adapter(NullStorageAdapter())
    set_identity_provider(NullIdentityProvider())
    set_mailer(NullMailer())


__all__ = [
    "InMemoryBackends",
    "get_identity_provider",
    "get_mailer",
    "get_storage_adapter",
    "get_table_store",
    "reset_to_null",
    "set_identity_provider",
    "set_mailer",
    "set_storage_adapter",
    "set_table_store",
    "use_in_memory_backends",
]
