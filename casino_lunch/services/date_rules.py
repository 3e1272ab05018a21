"""
Date rules
Decide whether a lunch day can be selected or an existing reservation changed

Rules:
- 48 hour lockout: a day whose instant is less than 48h away is locked
- weekend blackout: the casino does not serve on Saturday or Sunday
- new selections need both rules to pass; confirmed rows only the lockout

Calendar dates are anchored at midday local time before comparing. ``now``
defaults to the wall clock at call time and is never cached.
"""

from datetime import datetime, timedelta
from typing import Optional

from ..core.exceptions import ValidationError
from ..utils.dates import DateLike, anchor_midday, as_date

LOCKOUT_WINDOW = timedelta(hours=48)

LOCKOUT_MESSAGE = "No es posible reservar con menos de 48 horas de anticipación"
WEEKEND_MESSAGE = "El casino no funciona los fines de semana"


def _instant(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return anchor_midday(value)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def is_locked_out(value: DateLike, now: Optional[datetime] = None) -> bool:
    """True when the day is less than 48 hours away (strict)"""
    instant = _instant(value)
    current = _now(now)
    if (instant.tzinfo is None) != (current.tzinfo is None):
        # Compare in local wall-clock time
        instant = instant.astimezone().replace(tzinfo=None) if instant.tzinfo else instant
        current = current.astimezone().replace(tzinfo=None) if current.tzinfo else current
    return instant - current < LOCKOUT_WINDOW


def is_weekend(value: DateLike) -> bool:
    return as_date(value).weekday() >= 5


def is_selectable(value: DateLike, now: Optional[datetime] = None) -> bool:
    return not is_locked_out(value, now) and not is_weekend(value)


def is_modifiable(value: DateLike, now: Optional[datetime] = None) -> bool:
    return not is_locked_out(value, now)


def rejection_reason(value: DateLike, now: Optional[datetime] = None) -> Optional[str]:
    """User-facing reason a day cannot be selected, None when selectable"""
    if is_locked_out(value, now):
        return LOCKOUT_MESSAGE
    if is_weekend(value):
        return WEEKEND_MESSAGE
    return None


def ensure_selectable(value: DateLike, now: Optional[datetime] = None) -> None:
    """Raise ValidationError when the day cannot be selected"""
    reason = rejection_reason(value, now)
    if reason is not None:
        raise ValidationError(
            reason,
            "DATE_NOT_SELECTABLE",
            {"date": as_date(value).isoformat()},
        )
