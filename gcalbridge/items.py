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

"""Conversion of Google Calendar and Google Tasks records.

See:
    https://developers.google.com/calendar/api/v3/reference/events
    https://developers.google.com/tasks/reference/rest/v1/tasks
"""

import collections
import json
import logging
from typing import Optional

from icalendar.cal import Event, Todo

from . import (
    ITEM_TYPE_EVENT,
    ITEM_TYPE_TASK,
    CalendarItem,
    UnsupportedItemType,
)
from .alarms import DEFAULT_ALARM_PROPERTY, json_to_alarm
from .categories import CATEGORIES_KEY, categories_string_to_array
from .component import (
    INTEGER_MAX,
    INTEGER_MIN,
    VALUE_TYPE_BOOLEAN,
    VALUE_TYPE_CAL_ADDRESS,
    VALUE_TYPE_DATE_TIME,
    VALUE_TYPE_INTEGER,
    VALUE_TYPE_TEXT,
    VALUE_TYPE_URI,
    add_property,
    add_property_if,
    all_properties,
    first_property,
    is_true,
    new_calendar,
)
from .dates import json_to_date, parse_rfc3339
from .lookup import ATTENDEE_STATUS
from .patch import (
    END_TIME_UNSPECIFIED_PROPERTY,
    RECURRENCE_PROPERTIES,
    SNOOZE_RECUR_KEY,
    SNOOZE_TIME_PREFIX,
    MustDelete,
    patch_event,
    patch_task,
)

KIND_EVENT = "calendar#event"
KIND_TASK = "tasks#task"

# Appended to Google event ids to form an iCalendar UID
UID_DOMAIN = "@google.com"


ConversionContext = collections.namedtuple(
    "ConversionContext",
    ["restricted", "busy_title", "default_reminders"],
    defaults=(False, None, ()),
)


class CancelledItemError(Exception):
    """A cancelled event can not be created as a new record."""

    def __init__(self, item_id: Optional[str]) -> None:
        super().__init__(f"Item {item_id} is cancelled")
        self.item_id = item_id


def _calendar_user_address(entry: dict) -> str:
    if entry.get("email"):
        return "mailto:" + entry["email"]
    return "urn:id:" + str(entry.get("id"))


def _add_recurrence(vevent: Event, lines) -> None:
    if not lines:
        return
    text = "BEGIN:VEVENT\r\n" + "\r\n".join(lines) + "\r\nEND:VEVENT\r\n"
    parsed = Event.from_ical(text)
    for error in parsed.errors:
        logging.warning("Invalid recurrence line in %s: %r",
                        vevent.get("UID"), error)
    for name in RECURRENCE_PROPERTIES:
        for prop in all_properties(parsed, name):
            vevent.add(name, prop)


def _add_snooze_times(vevent: Event, snooze_recur: Optional[str]) -> None:
    if not snooze_recur:
        return
    try:
        snooze = json.loads(snooze_recur)
    except ValueError:
        logging.warning("Invalid %s value in %s", SNOOZE_RECUR_KEY,
                        vevent.get("UID"))
        return
    if not isinstance(snooze, dict):
        return
    for rid, value in snooze.items():
        if not value:
            continue
        try:
            snooze_time = parse_rfc3339(value)
        except ValueError:
            logging.warning("Invalid snooze time %r for %s", value, rid)
            continue
        add_property(vevent, SNOOZE_TIME_PREFIX + rid, VALUE_TYPE_DATE_TIME,
                     snooze_time)


def _add_date_time_if(comp, name, value) -> None:
    if value:
        add_property(comp, name, VALUE_TYPE_DATE_TIME, parse_rfc3339(value))


def json_to_event(
    entry: dict, context: Optional[ConversionContext] = None
) -> CalendarItem:
    """Convert a Google Calendar event record to a calendar item."""
    if context is None:
        context = ConversionContext()
    private_props = (entry.get("extendedProperties") or {}).get("private") or {}
    shared_props = (entry.get("extendedProperties") or {}).get("shared") or {}

    vevent = Event()

    uid = entry.get("iCalUID") or (
        (entry.get("recurringEventId") or entry.get("id")) + UID_DOMAIN
    )

    add_property(vevent, "UID", VALUE_TYPE_TEXT, uid)
    _add_date_time_if(vevent, "CREATED", entry.get("created"))
    _add_date_time_if(vevent, "LAST-MODIFIED", entry.get("updated"))
    _add_date_time_if(vevent, "DTSTAMP", entry.get("updated"))

    add_property_if(vevent, "DESCRIPTION", VALUE_TYPE_TEXT,
                    entry.get("description"))
    add_property_if(vevent, "LOCATION", VALUE_TYPE_TEXT, entry.get("location"))
    add_property_if(vevent, "STATUS", VALUE_TYPE_TEXT,
                    (entry.get("status") or "").upper())

    if entry.get("originalStartTime"):
        vevent.add("RECURRENCE-ID", json_to_date(entry["originalStartTime"]))

    if context.restricted:
        summary = context.busy_title
    else:
        summary = entry.get("summary")
    add_property_if(vevent, "SUMMARY", VALUE_TYPE_TEXT, summary)
    add_property_if(vevent, "CLASS", VALUE_TYPE_TEXT,
                    (entry.get("visibility") or "").upper())
    if entry.get("sequence") is not None:
        add_property(vevent, "SEQUENCE", VALUE_TYPE_INTEGER,
                     int(entry["sequence"]))
    add_property_if(vevent, "URL", VALUE_TYPE_URI, entry.get("htmlLink"))
    add_property_if(vevent, "TRANSP", VALUE_TYPE_TEXT,
                    (entry.get("transparency") or "").upper())

    if entry.get("start"):
        vevent.add("DTSTART", json_to_date(entry["start"]))
    if entry.get("endTimeUnspecified"):
        add_property(vevent, END_TIME_UNSPECIFIED_PROPERTY, VALUE_TYPE_BOOLEAN,
                     True)
    elif entry.get("end"):
        vevent.add("DTEND", json_to_date(entry["end"]))

    organizer = entry.get("organizer")
    if organizer:
        params = {}
        if organizer.get("displayName"):
            params["CN"] = organizer["displayName"]
        add_property(vevent, "ORGANIZER", VALUE_TYPE_CAL_ADDRESS,
                     _calendar_user_address(organizer), params)

    for attendee in entry.get("attendees") or []:
        params = {
            "ROLE": "OPT-PARTICIPANT" if attendee.get("optional")
            else "REQ-PARTICIPANT",
            "PARTSTAT": ATTENDEE_STATUS.to_ical(attendee.get("responseStatus")),
            "CUTYPE": "RESOURCE" if attendee.get("resource") else "INDIVIDUAL",
        }
        if attendee.get("displayName"):
            params["CN"] = attendee["displayName"]
        if attendee.get("comment"):
            params["COMMENT"] = attendee["comment"]
        if attendee.get("additionalGuests"):
            params["X-NUM-GUESTS"] = str(attendee["additionalGuests"])
        add_property(vevent, "ATTENDEE", VALUE_TYPE_CAL_ADDRESS,
                     _calendar_user_address(attendee), params)

    _add_recurrence(vevent, entry.get("recurrence"))

    reminders = entry.get("reminders")
    if reminders:
        if reminders.get("useDefault") and context.default_reminders:
            add_property(vevent, DEFAULT_ALARM_PROPERTY, VALUE_TYPE_BOOLEAN,
                         True)
            for reminder in context.default_reminders:
                vevent.add_component(json_to_alarm(reminder, is_default=True))
        for override in reminders.get("overrides") or []:
            vevent.add_component(json_to_alarm(override))

    _add_date_time_if(vevent, "X-MOZ-LASTACK", private_props.get("X-MOZ-LASTACK"))
    _add_date_time_if(vevent, "X-MOZ-SNOOZE-TIME",
                      private_props.get("X-MOZ-SNOOZE-TIME"))
    if entry.get("recurrence"):
        _add_snooze_times(vevent, private_props.get(SNOOZE_RECUR_KEY))

    categories = categories_string_to_array(shared_props.get(CATEGORIES_KEY))
    if categories:
        add_property(vevent, "CATEGORIES", VALUE_TYPE_TEXT, categories)

    return CalendarItem(
        id=uid,
        type=ITEM_TYPE_EVENT,
        calendar=new_calendar(vevent),
        title=summary,
        description=entry.get("description"),
        location=entry.get("location"),
        categories=categories,
        metadata={"etag": entry.get("etag"), "path": entry.get("id")},
    )


def json_to_task(
    entry: dict, context: Optional[ConversionContext] = None
) -> CalendarItem:
    """Convert a Google Tasks task record to a calendar item."""
    vtodo = Todo()

    add_property_if(vtodo, "UID", VALUE_TYPE_TEXT, entry.get("id"))
    _add_date_time_if(vtodo, "LAST-MODIFIED", entry.get("updated"))
    _add_date_time_if(vtodo, "DTSTAMP", entry.get("updated"))

    add_property_if(vtodo, "SUMMARY", VALUE_TYPE_TEXT, entry.get("title"))
    add_property_if(vtodo, "DESCRIPTION", VALUE_TYPE_TEXT, entry.get("notes"))
    add_property_if(vtodo, "URL", VALUE_TYPE_URI, entry.get("selfLink"))

    add_property_if(vtodo, "RELATED-TO", VALUE_TYPE_TEXT, entry.get("parent"),
                    {"RELTYPE": "PARENT"})
    if entry.get("position"):
        try:
            position = int(entry["position"])
        except ValueError:
            position = None
        if position is not None and INTEGER_MIN <= position <= INTEGER_MAX:
            add_property(vtodo, "X-GOOGLE-SORTKEY", VALUE_TYPE_INTEGER,
                         position)
        else:
            # Not an iCalendar integer
            add_property(vtodo, "X-GOOGLE-SORTKEY", VALUE_TYPE_TEXT,
                         entry["position"])

    if entry.get("deleted"):
        status = "CANCELLED"
    elif entry.get("status") == "needsAction":
        status = "NEEDS-ACTION"
    else:
        status = "COMPLETED"
    add_property(vtodo, "STATUS", VALUE_TYPE_TEXT, status)
    if status == "COMPLETED":
        add_property(vtodo, "PERCENT-COMPLETE", VALUE_TYPE_INTEGER, 100)
    _add_date_time_if(vtodo, "COMPLETED", entry.get("completed"))
    _add_date_time_if(vtodo, "DUE", entry.get("due"))

    for link in entry.get("links") or []:
        add_property(vtodo, "ATTACH", VALUE_TYPE_URI, link.get("link"), {
            "FILENAME": link.get("description"),
            "X-GOOGLE-TYPE": link.get("type"),
        })

    return CalendarItem(
        id=entry.get("id"),
        type=ITEM_TYPE_TASK,
        calendar=new_calendar(vtodo),
        title=entry.get("title"),
        description=entry.get("notes"),
        metadata={"etag": entry.get("etag"), "path": entry.get("id")},
    )


_IMPORTERS = {
    KIND_EVENT: json_to_event,
    KIND_TASK: json_to_task,
}


def json_to_item(
    entry: dict, context: Optional[ConversionContext] = None
) -> Optional[CalendarItem]:
    """Convert a Google record to a calendar item.

    Returns: a CalendarItem, or None if the record kind is not supported
    """
    try:
        importer = _IMPORTERS[entry.get("kind")]
    except KeyError:
        logging.error("Invalid item type %s", entry.get("kind"))
        return None
    return importer(entry, context)


def event_to_json(item: CalendarItem) -> dict:
    result = patch_event(item, CalendarItem.empty(ITEM_TYPE_EVENT))
    if isinstance(result, MustDelete):
        raise CancelledItemError(item.id)
    entry = result.entry
    if item.id:
        entry["iCalUID"] = item.id
    vevent = item.component
    if first_property(vevent, "DTEND") is None and is_true(
        vevent.get(END_TIME_UNSPECIFIED_PROPERTY)
    ):
        entry["endTimeUnspecified"] = True
    return entry


def task_to_json(item: CalendarItem) -> dict:
    entry = patch_task(item, CalendarItem.empty(ITEM_TYPE_TASK)).entry
    if item.id:
        entry["id"] = item.id
    return entry


_EXPORTERS = {
    ITEM_TYPE_EVENT: event_to_json,
    ITEM_TYPE_TASK: task_to_json,
}


def item_to_json(item: CalendarItem) -> dict:
    """Convert a calendar item to a complete Google record.

    :raise UnsupportedItemType: if the item is neither an event nor a task
    :raise CancelledItemError: if the item is a cancelled event
    """
    try:
        exporter = _EXPORTERS[item.type]
    except KeyError:
        raise UnsupportedItemType(item.type)
    return exporter(item)
