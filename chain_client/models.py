"""Chain state snapshots returned by the REST client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccountInfo:
    address: str
    account_number: int
    sequence: int
