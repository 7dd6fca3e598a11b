"""Privileged command and authority envelope models."""

from dataclasses import dataclass
from typing import Tuple

from param_policy.models import ParameterSet


@dataclass(frozen=True)
class PrivilegedCommand:
    authority_address: str
    parameters: ParameterSet


@dataclass(frozen=True)
class AuthorityEnvelope:
    acting_account: str
    inner_commands: Tuple[PrivilegedCommand, ...]
