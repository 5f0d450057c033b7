"""Client bridge that pairs with a Minecraft server and drives player-bound agents."""

from .bridge import SessionBridge
from .catalog import BlockCatalog
from .errors import BridgeError
from .models import BridgeState, Session

__version__ = "0.1.0"

__all__ = [
    "BlockCatalog",
    "BridgeError",
    "BridgeState",
    "Session",
    "SessionBridge",
]
