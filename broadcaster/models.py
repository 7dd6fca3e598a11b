"""Broadcast outcome models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BroadcastResult:
    """Terminal pipeline value. Accepted means admitted to the mempool."""

    accepted: bool
    transaction_hash: Optional[str] = None
    node_error_code: Optional[int] = None
    node_error_message: Optional[str] = None
    codespace: Optional[str] = None
