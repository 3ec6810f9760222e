"""Protocolos e contratos do core da sessão."""

from .models import (
    ClientConfig,
    DeviceVerificationStatus,
    LoginFlow,
    LoginFlowsResponse,
    SyncState,
    VersionsResponse,
    WhoAmIResponse,
)
from .protocol_client import (
    ClientFactoryProtocol,
    CryptoProtocol,
    ProtocolClientProtocol,
    SubscriptionProtocol,
    SyncListener,
)
from .errors import ProtocolRequestError
from .stores import (
    CryptoStoreProtocol,
    KeyValueStoreProtocol,
    StoreFactoryProtocol,
    SyncCacheProtocol,
)

__all__ = [
    "ClientConfig",
    "ClientFactoryProtocol",
    "CryptoProtocol",
    "CryptoStoreProtocol",
    "DeviceVerificationStatus",
    "KeyValueStoreProtocol",
    "LoginFlow",
    "LoginFlowsResponse",
    "ProtocolClientProtocol",
    "ProtocolRequestError",
    "StoreFactoryProtocol",
    "SubscriptionProtocol",
    "SyncCacheProtocol",
    "SyncListener",
    "SyncState",
    "VersionsResponse",
    "WhoAmIResponse",
]
