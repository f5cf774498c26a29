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

"""Typed access to iCalendar component trees.

Items are kept as ``icalendar`` components: a VCALENDAR holding a single
VEVENT or VTODO, which may in turn hold VALARM subcomponents. The helpers
in this module construct property values of an explicit value type and
read them back as plain Python values, returning None for absent
properties instead of relying on the truthiness of the stored objects.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

from icalendar.cal import Calendar, Component
from icalendar.prop import (
    TypesFactory,
    vBoolean,
    vCategory,
    vDDDLists,
    vDDDTypes,
    vDuration,
    vInt,
)

TYPES_FACTORY = TypesFactory()

PRODID = "-//gcalbridge//gcalbridge//EN"

VALUE_TYPE_TEXT = "text"
VALUE_TYPE_INTEGER = "integer"
VALUE_TYPE_BOOLEAN = "boolean"
VALUE_TYPE_URI = "uri"
VALUE_TYPE_DATE = "date"
VALUE_TYPE_DATE_TIME = "date-time"
VALUE_TYPE_DURATION = "duration"
VALUE_TYPE_CAL_ADDRESS = "cal-address"
VALUE_TYPES = (
    VALUE_TYPE_TEXT,
    VALUE_TYPE_INTEGER,
    VALUE_TYPE_BOOLEAN,
    VALUE_TYPE_URI,
    VALUE_TYPE_DATE,
    VALUE_TYPE_DATE_TIME,
    VALUE_TYPE_DURATION,
    VALUE_TYPE_CAL_ADDRESS,
)

# Range of INTEGER values (RFC 5545, section 3.3.8).
INTEGER_MIN = -2147483648
INTEGER_MAX = 2147483647


def make_value(value_type: str, value, params: Optional[dict] = None):
    """Create a typed property value.

    Args:
      value_type: One of VALUE_TYPES
      value: Python value (str, int, bool, date, datetime or timedelta)
      params: Optional property parameters
    Returns: icalendar property value
    """
    if value_type not in VALUE_TYPES:
        raise ValueError(f"unsupported value type {value_type!r}")
    if value_type == VALUE_TYPE_DATE and (
        not isinstance(value, date) or isinstance(value, datetime)
    ):
        raise TypeError(f"expected a date, got {value!r}")
    if value_type == VALUE_TYPE_DATE_TIME and not isinstance(value, datetime):
        raise TypeError(f"expected a datetime, got {value!r}")
    prop = TYPES_FACTORY[value_type](value)
    for key, param in (params or {}).items():
        if param is not None:
            prop.params[key] = param
    return prop


def add_property(
    component: Component, name: str, value_type: str, value, params=None
) -> None:
    """Append a property of an explicit value type to a component."""
    if name.upper() == "CATEGORIES":
        component.add(name, list(value))
        return
    component.add(name, make_value(value_type, value, params))


def add_property_if(
    component: Component, name: str, value_type: str, value, params=None
) -> None:
    """Append a property, but only if the value is set."""
    if value:
        add_property(component, name, value_type, value, params)


def all_properties(component: Optional[Component], name: str) -> list:
    if component is None:
        return []
    value = component.get(name)
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def first_property(component: Optional[Component], name: str):
    props = all_properties(component, name)
    if not props:
        return None
    return props[0]


def property_value(prop) -> Any:
    """Return the plain Python value of a property value."""
    if prop is None:
        return None
    if isinstance(prop, (vDDDTypes, vDuration)):
        return prop.dt
    if isinstance(prop, vDDDLists):
        return [p.dt for p in prop.dts]
    if isinstance(prop, vBoolean):
        return bool(prop)
    if isinstance(prop, vInt):
        return int(prop)
    if isinstance(prop, vCategory):
        return [str(cat) for cat in prop.cats]
    if isinstance(prop, str):
        return str(prop)
    return prop


def first_value(component: Optional[Component], name: str) -> Any:
    return property_value(first_property(component, name))


def all_subcomponents(component: Optional[Component], name: str) -> list:
    if component is None:
        return []
    return [c for c in component.subcomponents if c.name == name.upper()]


def first_subcomponent(
    component: Optional[Component], name: str
) -> Optional[Component]:
    for subcomponent in all_subcomponents(component, name):
        return subcomponent
    return None


def ical_text(prop) -> Optional[str]:
    """Return the iCalendar text serialization of a property value."""
    if prop is None:
        return None
    if isinstance(prop, list):
        return ",".join(ical_text(p) for p in prop)
    ret = prop.to_ical()
    if isinstance(ret, bytes):
        ret = ret.decode("utf-8")
    return ret


def content_line(name: str, prop) -> str:
    """Return the unfolded content line for a property (e.g. RRULE:...)."""
    return str(Component().content_line(name.upper(), prop))


def is_true(value) -> bool:
    """Interpret a boolean property value.

    Properties like X-DEFAULT-ALARM are parsed as text when read back from
    a serialized calendar.
    """
    if value is None:
        return False
    if isinstance(value, (bool, int)):
        return bool(value)
    return str(value).strip().upper() == "TRUE"


def as_tz_aware_ts(
    dt: Union[datetime, date], default_timezone: Union[str, timezone]
) -> datetime:
    if not isinstance(dt, datetime):
        _dt = datetime.combine(dt, time())
    else:
        _dt = dt
    if _dt.tzinfo is None:
        if isinstance(default_timezone, str):
            _dt = _dt.replace(tzinfo=ZoneInfo(default_timezone))
        else:
            _dt = _dt.replace(tzinfo=default_timezone)
    assert _dt.tzinfo
    return _dt


def new_calendar(component: Component) -> Calendar:
    """Wrap an item component in a VCALENDAR."""
    cal = Calendar()
    cal.add("PRODID", PRODID)
    cal.add("VERSION", "2.0")
    cal.add_component(component)
    return cal
