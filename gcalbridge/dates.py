# gcalbridge
# Copyright (C) 2026 gcalbridge contributors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; version 3
# of the License or (at your option) any later version of
# the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
# MA  02110-1301, USA.

"""Date handling for Google records.

Google date objects are either ``{"date": "2024-01-01"}`` for all day
values or ``{"dateTime": "2024-01-01T10:00:00+01:00", "timeZone": ...}``.
Other timestamps (created, updated, due, completed) are RFC3339 strings.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse

from .component import VALUE_TYPE_DATE, VALUE_TYPE_DATE_TIME, make_value

# Zone names that are written with a "Z" suffix instead of a time zone.
UTC_ZONES = ("UTC", "Etc/UTC", "Etc/Zulu", "Zulu")


def parse_rfc3339(value: str) -> datetime:
    """Parse a RFC3339 timestamp; naive timestamps are taken to be UTC."""
    dt = isoparse(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def format_rfc3339(value: Union[date, datetime, None]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def json_to_date(dateobj: dict):
    """Convert a Google date object to a DATE or DATE-TIME value."""
    if dateobj.get("date"):
        return make_value(VALUE_TYPE_DATE, date.fromisoformat(dateobj["date"]))
    dt = isoparse(dateobj["dateTime"])
    tzid = dateobj.get("timeZone")
    if not tzid:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return make_value(VALUE_TYPE_DATE_TIME, dt.astimezone(timezone.utc))
    try:
        zone = ZoneInfo(tzid)
    except (ZoneInfoNotFoundError, ValueError):
        logging.warning("Unknown time zone %s, keeping wall clock time", tzid)
        return make_value(
            VALUE_TYPE_DATE_TIME, dt.replace(tzinfo=None), {"TZID": tzid}
        )
    if dt.tzinfo is None:
        return make_value(VALUE_TYPE_DATE_TIME, dt.replace(tzinfo=zone))
    return make_value(VALUE_TYPE_DATE_TIME, dt.astimezone(zone))


def date_to_json(prop) -> Optional[dict]:
    """Convert a DATE or DATE-TIME property to a Google date object."""
    if prop is None:
        return None
    value = prop.dt
    if not isinstance(value, datetime):
        return {"date": value.isoformat()}
    tzid = prop.params.get("TZID")
    if (
        tzid is None
        and isinstance(value.tzinfo, ZoneInfo)
        and value.tzinfo.key not in UTC_ZONES
    ):
        tzid = value.tzinfo.key
    if tzid:
        return {
            "dateTime": value.strftime("%Y-%m-%dT%H:%M:%S"),
            "timeZone": str(tzid),
        }
    if value.tzinfo is not None:
        return {
            "dateTime": value.astimezone(timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%SZ")
        }
    return {"dateTime": value.strftime("%Y-%m-%dT%H:%M:%S")}
