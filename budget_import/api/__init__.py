"""API package: exposes the router and the dependency providers."""

from .dependencies import get_current_user_id, get_settings, get_store  # noqa: F401
from .routes import router  # noqa: F401
