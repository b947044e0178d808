"""HTTP routers for the AstroChat backend."""

from astrochat.app.api.chat import router as chat_router
from astrochat.app.api.health import router as health_router
from astrochat.app.api.user_status import router as user_status_router

__all__ = ["chat_router", "health_router", "user_status_router"]
