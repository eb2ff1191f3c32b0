from .mood_log_entry import MoodLogEntry
from .user_profile import UserProfile

__all__ = ["MoodLogEntry", "UserProfile"]
