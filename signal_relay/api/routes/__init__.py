from .system import router as system_router  # noqa: F401
from .webhook import router as webhook_router  # noqa: F401
from .positions import router as positions_router  # noqa: F401

__all__ = ["system_router", "webhook_router", "positions_router"]
