from .models import AccountInfo
from .rest import (
    BROADCAST_MODE_SYNC,
    ChainQueryError,
    ChainRestClient,
    NodeRejectedError,
    TransportError,
)

__all__ = [
    "AccountInfo",
    "BROADCAST_MODE_SYNC",
    "ChainQueryError",
    "ChainRestClient",
    "NodeRejectedError",
    "TransportError",
]
