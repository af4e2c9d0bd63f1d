"""Remote data service transports."""

from .base import RemoteStore
from .factory import create_local_store, create_remote_store
from .memory import InMemoryRemoteStore
from .postgrest import PostgrestRemoteStore, kind_for_response

__all__ = [
    "InMemoryRemoteStore",
    "PostgrestRemoteStore",
    "RemoteStore",
    "create_local_store",
    "create_remote_store",
    "kind_for_response",
]
