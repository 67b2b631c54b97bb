"""
Security event auditing and request rate limiting.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Deque, Dict, List, Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# Rate limiter configuration
limiter = Limiter(key_func=get_remote_address)

LOGIN_LIMIT = "5/15minutes"
SIGNUP_LIMIT = "3/hour"

LOGIN_ATTEMPT = "login_attempt"
LOGIN_SUCCESS = "login_success"
LOGIN_FAILURE = "login_failure"
SIGNUP = "signup"
SUSPICIOUS_ACTIVITY = "suspicious_activity"
RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SecurityEvent:
    type: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)
    details: Dict[str, Any] = field(default_factory=dict)

    def matches(self, user_id: Optional[str], email: Optional[str]) -> bool:
        return (user_id is not None and self.user_id == user_id) or (
            email is not None and self.email == email
        )


class SecurityAuditor:
    """Bounded in-memory log of recent security events."""

    def __init__(self, max_events: int = 1000, clock=_utcnow):
        self.max_events = max_events
        self._clock = clock
        self._events: Deque[SecurityEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def log_event(self, event_type: str, **kwargs) -> SecurityEvent:
        event = SecurityEvent(type=event_type, timestamp=self._clock(), **kwargs)
        with self._lock:
            self._events.append(event)
        logger.info(
            f"Security event {event_type} user={event.user_id} email={event.email} ip={event.ip}"
        )
        return event

    def recent_events(self, limit: int = 50) -> List[SecurityEvent]:
        with self._lock:
            events = list(self._events)
        return events[-limit:]

    def events_by_type(self, event_type: str, limit: int = 50) -> List[SecurityEvent]:
        return [e for e in self.recent_events(self.max_events) if e.type == event_type][-limit:]

    def detect_suspicious_activity(
        self, user_id: Optional[str] = None, email: Optional[str] = None
    ) -> bool:
        """Five failed logins in an hour, or ten attempts in five minutes."""
        now = self._clock()
        recent = self.recent_events(100)

        failures = [
            e for e in recent
            if e.type == LOGIN_FAILURE
            and e.timestamp > now - timedelta(hours=1)
            and e.matches(user_id, email)
        ]
        if len(failures) >= 5:
            return True

        attempts = [
            e for e in recent
            if e.type == LOGIN_ATTEMPT
            and e.timestamp > now - timedelta(minutes=5)
            and e.matches(user_id, email)
        ]
        return len(attempts) >= 10

    def cleanup(self, max_age: timedelta = timedelta(days=7)) -> int:
        cutoff = self._clock() - max_age
        with self._lock:
            before = len(self._events)
            kept = [e for e in self._events if e.timestamp > cutoff]
            self._events = deque(kept, maxlen=self.max_events)
        return before - len(kept)


security_auditor = SecurityAuditor()
