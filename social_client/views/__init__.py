"""Views that consume the auto-refresh scheduler."""
from .base import RefreshingView
from .feed import FeedView
from .messages import MessagesView
from .notifications import NotificationBadgeView
from .profile import ProfileView
from .registry import ViewRegistry, build_default_views

__all__ = [
    "RefreshingView",
    "FeedView",
    "MessagesView",
    "NotificationBadgeView",
    "ProfileView",
    "ViewRegistry",
    "build_default_views",
]
