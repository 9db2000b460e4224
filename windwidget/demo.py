"""Synthetic wind data for previews and for when nothing real is available."""
from __future__ import annotations

import datetime as dt
import math
import random
from typing import Optional

from windwidget.config import DEFAULT_LOCATION_NAME
from windwidget.ecowitt.parser import TIME_FORMAT
from windwidget.models import DataStatus, WindReading

DEMO_POINTS = 36
DEMO_STEP = dt.timedelta(minutes=5)
DEMO_BEARING = 85.0  # ENE

# Shown in the bottom bar; intentionally not derived from the generated series.
DEMO_CURRENT_SPEED = 11.5
DEMO_CURRENT_DIRECTION = 74.0
DEMO_CURRENT_GUST = 15.0


def generate_demo_reading(
    now: Optional[dt.datetime] = None,
    rng: Optional[random.Random] = None,
    *,
    location_name: str = DEFAULT_LOCATION_NAME,
) -> WindReading:
    """Return 36 points of plausible 11-14 kt ENE wind over the trailing 3 hours."""
    now = now or dt.datetime.now().astimezone()
    rng = rng or random.Random()
    start = now - DEMO_POINTS * DEMO_STEP

    times, speeds, directions, gusts = [], [], [], []
    for i in range(DEMO_POINTS):
        times.append((start + i * DEMO_STEP).strftime(TIME_FORMAT))
        base = 11.5 + 1.5 * math.sin(i * 0.3)
        speed = base + rng.uniform(0.0, 1.5)
        speeds.append(speed)
        directions.append(DEMO_BEARING + rng.uniform(-5.0, 5.0))
        gusts.append(speed * rng.uniform(1.3, 1.5))

    return WindReading(
        location_name=location_name,
        times=times,
        speeds=speeds,
        directions=directions,
        gusts=gusts,
        current_speed=DEMO_CURRENT_SPEED,
        current_direction=DEMO_CURRENT_DIRECTION,
        current_gust=DEMO_CURRENT_GUST,
        status=DataStatus.DEMO,
        last_updated_millis=int(now.timestamp() * 1000),
    )
