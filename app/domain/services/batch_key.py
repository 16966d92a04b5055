# app/domain/services/batch_key.py
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

import config

BATCH_TZ = ZoneInfo(config.BATCH_TIMEZONE)


def to_civil(now: datetime, tz: tzinfo = BATCH_TZ) -> datetime:
    """Convierte `now` a hora civil de `tz`. Un datetime naive se toma como UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def current_batch_key(now: Optional[datetime] = None, tz: tzinfo = BATCH_TZ) -> str:
    """
    Lote semanal: fecha (YYYY-MM-DD) del lunes más reciente a las 00:00 en
    hora civil de `tz`, sin depender de la zona horaria del servidor.
    """
    civil = to_civil(now or datetime.now(timezone.utc), tz)
    # 0=Dom, 1=Lun, ... 6=Sáb
    day = (civil.weekday() + 1) % 7
    days_since_monday = (day - 1 + 7) % 7
    monday = civil.date() - timedelta(days=days_since_monday)
    return monday.isoformat()
