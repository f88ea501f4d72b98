"""User profiles and the profile store."""

from request_sentinel.profile.manager import ProfileManager
from request_sentinel.profile.models import ProfileSet, UserProfile

__all__ = ["ProfileManager", "ProfileSet", "UserProfile"]
