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

"""Conversion between VALARM components and Google reminders.

A Google reminders object looks like::

    {"useDefault": False, "overrides": [{"method": "popup", "minutes": 10}]}

``useDefault`` refers to the default reminders configured on the calendar.
Alarms standing in for those carry an X-DEFAULT-ALARM marker and are never
sent back as overrides.
"""

import logging
import math
from datetime import timedelta, timezone

from icalendar.cal import Alarm, Component

from .component import (
    VALUE_TYPE_BOOLEAN,
    VALUE_TYPE_DURATION,
    VALUE_TYPE_TEXT,
    add_property,
    all_subcomponents,
    as_tz_aware_ts,
    first_property,
    first_value,
    is_true,
)
from .lookup import ALARM_ACTION

# Maximum reminder lead time Google accepts.
FOUR_WEEKS_IN_MINUTES = 40320

MAX_OVERRIDES = 5

DEFAULT_ALARM_PROPERTY = "X-DEFAULT-ALARM"


def clamp_minutes(minutes: int) -> int:
    return min(max(0, minutes), FOUR_WEEKS_IN_MINUTES)


def _item_length(comp: Component) -> float:
    dtstart = first_value(comp, "DTSTART")
    dtend = first_value(comp, "DTEND")
    if dtstart is None or dtend is None:
        return 0
    return (
        as_tz_aware_ts(dtend, timezone.utc) - as_tz_aware_ts(dtstart, timezone.utc)
    ).total_seconds()


def _trigger_minutes(comp: Component, trigger) -> int:
    """Minutes before the start of comp at which an alarm fires."""
    value = trigger.dt
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
        params = getattr(trigger, "params", {})
        if str(params.get("RELATED", "START")).upper() == "END":
            seconds += _item_length(comp)
        return -math.floor(seconds / 60)
    dtstart = first_value(comp, "DTSTART")
    if dtstart is None:
        return 0
    delta = as_tz_aware_ts(dtstart, timezone.utc) - as_tz_aware_ts(
        value, timezone.utc
    )
    return math.floor(delta.total_seconds() / 60)


def convert_reminders(comp: Component) -> dict:
    """Build a Google reminders object from the alarms of a component.

    At most MAX_OVERRIDES alarms are kept. Scanning continues past that
    point, since a default alarm marker may still follow.
    """
    reminders = {"overrides": [], "useDefault": False}
    for valarm in all_subcomponents(comp, "VALARM"):
        if is_true(first_value(valarm, DEFAULT_ALARM_PROPERTY)):
            reminders["useDefault"] = True
            continue
        if len(reminders["overrides"]) == MAX_OVERRIDES:
            continue
        trigger = first_property(valarm, "TRIGGER")
        if trigger is None:
            logging.warning("Skipping alarm without trigger in %s",
                            first_value(comp, "UID"))
            continue
        reminders["overrides"].append({
            "method": ALARM_ACTION.from_ical(first_value(valarm, "ACTION")),
            "minutes": clamp_minutes(_trigger_minutes(comp, trigger)),
        })

    if not reminders["overrides"] and is_true(
        first_value(comp, DEFAULT_ALARM_PROPERTY)
    ):
        del reminders["overrides"]
        reminders["useDefault"] = True

    return reminders


def have_reminders_changed(reminders: dict, old_reminders: dict) -> bool:
    """Check whether two reminders objects differ.

    Overrides are compared as a set of (method, minutes) pairs, so two
    identical overrides can not be told apart.
    """
    overrides = reminders.get("overrides", [])
    old_overrides = old_reminders.get("overrides", [])
    if bool(reminders.get("useDefault")) != bool(old_reminders.get("useDefault")):
        return True
    if len(overrides) != len(old_overrides):
        return True
    keys = {(o["method"], o["minutes"]) for o in overrides}
    return any((o["method"], o["minutes"]) not in keys for o in old_overrides)


def json_to_alarm(entry: dict, is_default: bool = False) -> Alarm:
    """Create a VALARM for a Google reminder override."""
    valarm = Alarm()
    minutes = clamp_minutes(int(entry.get("minutes", 0)))
    add_property(valarm, "ACTION", VALUE_TYPE_TEXT,
                 ALARM_ACTION.to_ical(entry.get("method")))
    add_property(valarm, "DESCRIPTION", VALUE_TYPE_TEXT, "alarm")
    add_property(valarm, "TRIGGER", VALUE_TYPE_DURATION,
                 timedelta(minutes=-minutes))
    if is_default:
        add_property(valarm, DEFAULT_ALARM_PROPERTY, VALUE_TYPE_BOOLEAN, True)
    return valarm
