from .composer import MessageComposer, ensure_acting_account
from .models import AuthorityEnvelope, PrivilegedCommand
from .wire import (
    MSG_EXECUTE_MESSAGES_TYPE_URL,
    MSG_UPDATE_PARAMS_TYPE_URL,
    envelope_to_any,
    params_to_proto,
)

__all__ = [
    "AuthorityEnvelope",
    "MSG_EXECUTE_MESSAGES_TYPE_URL",
    "MSG_UPDATE_PARAMS_TYPE_URL",
    "MessageComposer",
    "PrivilegedCommand",
    "ensure_acting_account",
    "envelope_to_any",
    "params_to_proto",
]
