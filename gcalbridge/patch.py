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

"""Minimal patches between two versions of a calendar item.

Only fields that differ between the old and the new version end up in the
patch, so that other clients of the remote calendar are not disturbed by
unrelated changes. A field that was removed is sent as None (JSON null).
"""

import collections
import json
from typing import Callable, Optional, Union

from icalendar.cal import Component

from . import ITEM_TYPE_EVENT, ITEM_TYPE_TASK, CalendarItem, UnsupportedItemType
from .alarms import convert_reminders, have_reminders_changed
from .categories import CATEGORIES_KEY, array_to_categories_string
from .component import (
    all_properties,
    content_line,
    first_property,
    ical_text,
    property_value,
)
from .dates import date_to_json, format_rfc3339
from .lookup import ATTENDEE_STATUS

END_TIME_UNSPECIFIED_PROPERTY = "X-GOOGLE-ENDTIMEUNSPECIFIED"
SNOOZE_TIME_PREFIX = "X-MOZ-SNOOZE-TIME-"
SNOOZE_RECUR_KEY = "X-GOOGLE-SNOOZE-RECUR"

RECURRENCE_PROPERTIES = ("RRULE", "RDATE", "EXDATE")

# Attendee parameters that are sent to Google.
ATTENDEE_PARAMS = ("CN", "ROLE", "CUTYPE", "PARTSTAT")


Patch = collections.namedtuple("Patch", ["entry"])

# The new version of an item can not be expressed as an update; the item
# has to be removed remotely instead.
MustDelete = collections.namedtuple("MustDelete", ["item_id"])


def _set_if_changed(
    entry: dict,
    key: str,
    comp: Component,
    old_comp: Component,
    name: str,
    transform: Optional[Callable] = None,
) -> None:
    prop = first_property(comp, name)
    if ical_text(prop) == ical_text(first_property(old_comp, name)):
        return
    value = property_value(prop)
    if transform is not None:
        value = transform(prop, value)
    entry[key] = value


def _set_if_date_changed(
    entry: dict, key: str, comp: Component, old_comp: Component, name: str
) -> None:
    prop = first_property(comp, name)
    old_prop = first_property(old_comp, name)
    if prop is None and old_prop is None:
        return
    if prop is None or old_prop is None or prop.dt != old_prop.dt:
        entry[key] = date_to_json(prop)


def _lower(prop, value):
    if value is None:
        return None
    return str(value).lower()


def _native_text(prop, value):
    return ical_text(prop)


def _attendee_params(attendee) -> tuple:
    return tuple(
        str(attendee.params[name]) if name in attendee.params else None
        for name in ATTENDEE_PARAMS
    )


def have_attendees_changed(comp: Component, old_comp: Component) -> bool:
    """Check whether the attendees of an event differ.

    Attendees are matched on their address. Only the parameters that are
    sent to Google are taken into account.
    """
    old_attendees = {str(a): a for a in all_properties(old_comp, "ATTENDEE")}
    attendees = all_properties(comp, "ATTENDEE")
    if len(attendees) != len(old_attendees):
        return True
    for attendee in attendees:
        old_attendee = old_attendees.pop(str(attendee), None)
        if old_attendee is None:
            return True
        if _attendee_params(attendee) != _attendee_params(old_attendee):
            return True
    return bool(old_attendees)


def convert_attendees(comp: Component) -> list[dict]:
    attendees = []
    for attendee in all_properties(comp, "ATTENDEE"):
        params = attendee.params
        value = str(attendee)
        att = {}
        if params.get("CN"):
            att["displayName"] = str(params["CN"])
        if value.lower().startswith("mailto:"):
            att["email"] = value[len("mailto:"):]
        elif params.get("EMAIL"):
            att["email"] = str(params["EMAIL"])
        elif value.lower().startswith("urn:id:"):
            att["id"] = value[len("urn:id:"):]
        att["optional"] = params.get("ROLE") == "OPT-PARTICIPANT"
        att["resource"] = params.get("CUTYPE") == "RESOURCE"
        att["responseStatus"] = ATTENDEE_STATUS.from_ical(params.get("PARTSTAT"))
        if params.get("COMMENT"):
            att["comment"] = str(params["COMMENT"])
        if params.get("X-NUM-GUESTS"):
            att["additionalGuests"] = int(params["X-NUM-GUESTS"])
        attendees.append(att)
    return attendees


def convert_recurrence(comp: Component) -> list[str]:
    """Return the recurrence lines of a component, without duplicates."""
    lines = {}
    for name in RECURRENCE_PROPERTIES:
        for prop in all_properties(comp, name):
            lines[content_line(name, prop)] = None
    return list(lines)


def convert_recurring_snooze_time(comp: Component) -> Optional[str]:
    """Collect the per occurrence snooze times of a recurring event.

    Returns: JSON object mapping recurrence ids to snooze times, or None
    """
    snooze = {}
    for name in comp.keys():
        if name.upper().startswith(SNOOZE_TIME_PREFIX):
            rid = name[len(SNOOZE_TIME_PREFIX):]
            snooze[rid] = ical_text(first_property(comp, name))
    if not snooze:
        return None
    return json.dumps(snooze, sort_keys=True)


def _is_recurring(comp: Component) -> bool:
    return (first_property(comp, "RRULE") is not None
            or first_property(comp, "RDATE") is not None)


def patch_event(item: CalendarItem, old_item: CalendarItem) -> Union[Patch, MustDelete]:
    """Build the patch turning old_item into item.

    :raise MissingComponent: if either item lacks its VEVENT
    Returns: Patch, or MustDelete if the event was cancelled
    """
    vevent = item.component
    old_vevent = old_item.component
    entry = {}
    shared = {}
    private = {}

    _set_if_changed(entry, "summary", vevent, old_vevent, "SUMMARY")
    _set_if_changed(entry, "description", vevent, old_vevent, "DESCRIPTION")
    _set_if_changed(entry, "location", vevent, old_vevent, "LOCATION")

    _set_if_date_changed(entry, "start", vevent, old_vevent, "DTSTART")
    _set_if_date_changed(entry, "end", vevent, old_vevent, "DTEND")
    if "end" in entry and entry["end"] is None:
        del entry["end"]
        entry["endTimeUnspecified"] = True

    if _is_recurring(vevent):
        snooze = convert_recurring_snooze_time(vevent)
        if snooze != convert_recurring_snooze_time(old_vevent):
            private[SNOOZE_RECUR_KEY] = snooze

    old_recurrence = set(convert_recurrence(old_vevent))
    recurrence = convert_recurrence(vevent)
    if len(old_recurrence) != len(recurrence) or any(
        line not in old_recurrence for line in recurrence
    ):
        entry["recurrence"] = recurrence

    _set_if_date_changed(entry, "originalStartTime", vevent, old_vevent,
                         "RECURRENCE-ID")

    _set_if_changed(entry, "sequence", vevent, old_vevent, "SEQUENCE")
    _set_if_changed(entry, "transparency", vevent, old_vevent, "TRANSP", _lower)
    _set_if_changed(entry, "visibility", vevent, old_vevent, "CLASS", _lower)

    _set_if_changed(entry, "status", vevent, old_vevent, "STATUS", _lower)
    if entry.get("status") == "cancelled":
        return MustDelete(item.id)
    if "status" in entry and entry["status"] in (None, "none"):
        del entry["status"]

    if have_attendees_changed(vevent, old_vevent):
        entry["attendees"] = convert_attendees(vevent)

    reminders = convert_reminders(vevent)
    if have_reminders_changed(reminders, convert_reminders(old_vevent)):
        entry["reminders"] = reminders

    old_categories = set(old_item.categories)
    if len(old_categories) != len(item.categories) or any(
        cat not in old_categories for cat in item.categories
    ):
        shared[CATEGORIES_KEY] = array_to_categories_string(item.categories)

    _set_if_changed(private, "X-MOZ-LASTACK", vevent, old_vevent,
                    "X-MOZ-LASTACK", _native_text)
    _set_if_changed(private, "X-MOZ-SNOOZE-TIME", vevent, old_vevent,
                    "X-MOZ-SNOOZE-TIME", _native_text)

    extended = {}
    if shared:
        extended["shared"] = shared
    if private:
        extended["private"] = private
    if extended:
        entry["extendedProperties"] = extended

    return Patch(entry)


def _task_status(prop, value):
    if value is not None and str(value).upper() == "COMPLETED":
        return "completed"
    return "needsAction"


def _rfc3339(prop, value):
    return format_rfc3339(value)


def patch_task(item: CalendarItem, old_item: CalendarItem) -> Patch:
    """Build the patch turning old_item into item.

    :raise MissingComponent: if either item lacks its VTODO
    """
    vtodo = item.component
    old_vtodo = old_item.component
    entry = {}

    _set_if_changed(entry, "title", vtodo, old_vtodo, "SUMMARY")
    _set_if_changed(entry, "status", vtodo, old_vtodo, "STATUS", _task_status)
    _set_if_changed(entry, "notes", vtodo, old_vtodo, "DESCRIPTION")
    _set_if_changed(entry, "due", vtodo, old_vtodo, "DUE", _rfc3339)
    _set_if_changed(entry, "completed", vtodo, old_vtodo, "COMPLETED", _rfc3339)

    return Patch(entry)


_PATCHERS = {
    ITEM_TYPE_EVENT: patch_event,
    ITEM_TYPE_TASK: patch_task,
}


def patch_item(item: CalendarItem, old_item: CalendarItem) -> Union[Patch, MustDelete]:
    """Build the patch to send to Google for a changed item.

    :raise UnsupportedItemType: if the item is neither an event nor a task
    :raise MissingComponent: if an item lacks its VEVENT or VTODO
    """
    try:
        patcher = _PATCHERS[item.type]
    except KeyError:
        raise UnsupportedItemType(item.type)
    return patcher(item, old_item)
