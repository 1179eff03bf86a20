"""Session Service: conversation-level analytics.

- SessionSummarizer: summary of a session's analysed messages
- update_user_profile: rolling per-user view
- SystemMetrics: process-wide counters
"""

from .session_summarizer import SessionRecord, SessionSummarizer, SessionSummary
from .user_profile import SystemMetrics, UserProfile, update_user_profile

__all__ = [
    "SessionRecord",
    "SessionSummarizer",
    "SessionSummary",
    "SystemMetrics",
    "UserProfile",
    "update_user_profile",
]
