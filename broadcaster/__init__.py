from .broadcaster import Broadcaster, interpret_response
from .models import BroadcastResult

__all__ = ["BroadcastResult", "Broadcaster", "interpret_response"]
