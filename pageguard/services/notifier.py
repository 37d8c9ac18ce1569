import logging
import math
import threading
import time
from typing import Any, Dict, Optional

from pageguard.schemas import Notification

logger = logging.getLogger(__name__)


class AlertRateLimiter:
    """
    Counts alerts per alert id and refuses more than ``max_per_key``.

    Counters live for the lifetime of the limiter; the scorer never sees them.
    """

    def __init__(self, max_per_key: int = 2):
        self.max_per_key = max_per_key
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def increment(self, key: str) -> int:
        with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1
            return self._counts[key]

    def try_acquire(self, key: str) -> bool:
        """Count one alert for ``key`` if it is still under the limit"""
        with self._lock:
            count = self._counts.get(key, 0)
            if count >= self.max_per_key:
                return False
            self._counts[key] = count + 1
            return True

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._counts.clear()
            else:
                self._counts.pop(key, None)


def _percent(score: Any) -> int:
    try:
        value = float(score or 0)
    except (TypeError, ValueError):
        value = 0.0
    # Half-up, matching how the popup displays scores
    return int(math.floor(value * 100 + 0.5))


def build_notification(origin: str, result: Optional[Dict[str, Any]],
                       raw_msg: Optional[str] = None) -> Notification:
    suspicious = bool(result and result.get("suspicious"))
    score = (result or {}).get("score", 0)

    title = "Possible phishing detected" if suspicious else "Site looks OK"
    if raw_msg:
        message = raw_msg
    elif suspicious:
        message = f"Suspicion {_percent(score)}% for {origin}. Click to review."
    else:
        message = f"Checked {origin}: score {_percent(score)}%"
    return Notification(title=title, message=message)


class NotificationService:
    """
    Builds rate-limited phishing notifications. Delivery belongs to the
    client; this service only decides whether one should be shown.
    """

    def __init__(self, limiter: AlertRateLimiter):
        self.limiter = limiter

    def notify(self, alert_id: str, origin: str, result: Optional[Dict[str, Any]],
               raw_msg: Optional[str] = None) -> Optional[Notification]:
        key = alert_id or origin or f"a-{int(time.time() * 1000)}"
        if not self.limiter.try_acquire(key):
            logger.info(f"Alert limit reached for {key}")
            return None

        notification = build_notification(origin, result, raw_msg)
        logger.warning(f"🚨 {notification.title}: {origin or key}")
        return notification
