# -*- coding: utf-8 -*-
# Asynchronous S3 Item Client for Python
# (C) 2022 L-ING <hlf01@icloud.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Time formatter for S3 APIs."""

from __future__ import absolute_import, annotations

import time as ctime
from datetime import datetime, timezone

_WEEK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]


def _to_utc(value: datetime) -> datetime:
    """Convert to UTC time if value is not naive."""
    return value.astimezone(timezone.utc).replace(tzinfo=None) if value.tzinfo else value


def utcnow() -> datetime:
    """Timezone-aware wrapper to datetime.utcnow()."""
    return datetime.now(timezone.utc)


def to_http_header(value: datetime) -> str:
    """Format datetime into HTTP header date formatted string."""
    value = _to_utc(value)
    return (
        f"{_WEEK_DAYS[value.weekday()]}, {value.day:02d} "
        f"{_MONTHS[value.month - 1]} {value.year} "
        f"{value.strftime('%H:%M:%S')} GMT"
    )


def from_http_header(value: str) -> datetime:
    """Parse HTTP header date formatted string to datetime."""
    if len(value) != 29:
        raise ValueError(
            f"time data {value} does not match HTTP header format",
        )

    if value[0:3] not in _WEEK_DAYS or value[3] != ",":
        raise ValueError(
            f"time data {value} does not match HTTP header format",
        )
    weekday = _WEEK_DAYS.index(value[0:3])

    if value[4] != " " or value[7] != " ":
        raise ValueError(
            f"time data {value} does not match HTTP header format",
        )
    day = int(value[5:7])

    if value[8:11] not in _MONTHS:
        raise ValueError(
            f"time data {value} does not match HTTP header format",
        )
    month = _MONTHS.index(value[8:11])

    result = datetime.strptime(
        f"{value[0:4]} {day:02d} {month + 1:02d} {value[12:]}",
        "%a, %d %m %Y %H:%M:%S GMT",
    ).replace(tzinfo=timezone.utc)

    if weekday != result.weekday():
        raise ValueError(
            f"{weekday} mismatches with weekday {result.weekday()}",
        )

    return result


def to_unix_timestamp(value: datetime | int | float) -> int:
    """Convert datetime or number of seconds since epoch to integer seconds."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return int(value)


def now_timestamp() -> int:
    """Get current Unix timestamp."""
    return int(ctime.time())
