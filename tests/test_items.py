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

"""Tests for gcalbridge.items."""

import copy
import json
import unittest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from gcalbridge import CalendarItem, UnsupportedItemType
from gcalbridge.component import (
    all_properties,
    all_subcomponents,
    first_property,
    first_value,
    ical_text,
    is_true,
)
from gcalbridge.items import (
    CancelledItemError,
    ConversionContext,
    item_to_json,
    json_to_event,
    json_to_item,
    json_to_task,
)

EXAMPLE_EVENT = {
    "kind": "calendar#event",
    "etag": '"3394751574490000"',
    "id": "go6ijb0b46hlpbu4eeu92njevo",
    "status": "confirmed",
    "htmlLink": "https://www.google.com/calendar/event?eid=Z282aWpi",
    "created": "2024-01-01T08:00:00.000Z",
    "updated": "2024-01-02T08:00:00.000Z",
    "summary": "Planning",
    "description": "Plan the next quarter",
    "location": "Room 1",
    "iCalUID": "go6ijb0b46hlpbu4eeu92njevo@google.com",
    "sequence": 2,
    "transparency": "transparent",
    "visibility": "private",
    "start": {
        "dateTime": "2024-01-05T10:00:00+01:00",
        "timeZone": "Europe/Berlin",
    },
    "end": {
        "dateTime": "2024-01-05T11:00:00+01:00",
        "timeZone": "Europe/Berlin",
    },
    "organizer": {"email": "boss@example.com", "displayName": "The Boss"},
    "attendees": [
        {
            "email": "alice@example.com",
            "displayName": "Alice",
            "responseStatus": "accepted",
        },
        {
            "id": "room1",
            "optional": True,
            "resource": True,
            "responseStatus": "bogus",
            "comment": "might be late",
            "additionalGuests": 2,
        },
    ],
    "recurrence": [
        "RRULE:FREQ=WEEKLY;COUNT=4",
        "EXDATE;TZID=Europe/Berlin:20240112T100000",
    ],
    "reminders": {
        "useDefault": False,
        "overrides": [{"method": "email", "minutes": 30}],
    },
    "extendedProperties": {
        "shared": {"X-MOZ-CATEGORIES": "work,a\\,b"},
        "private": {"X-MOZ-LASTACK": "2024-01-03T09:00:00Z"},
    },
}

EXAMPLE_TASK = {
    "kind": "tasks#task",
    "id": "MTAxNjE3",
    "etag": '"LTEwNjk"',
    "title": "Buy milk",
    "notes": "Two liters",
    "updated": "2024-01-02T08:00:00.000Z",
    "selfLink": "https://www.googleapis.com/tasks/v1/lists/x/tasks/MTAxNjE3",
    "parent": "MTAxNjE2",
    "position": "00000000000000000005",
    "status": "needsAction",
    "due": "2024-01-05T00:00:00.000Z",
    "links": [
        {"description": "Mail", "type": "email", "link": "https://mail.example.com/1"},
    ],
}


def _event(**kwargs):
    entry = copy.deepcopy(EXAMPLE_EVENT)
    entry.update(kwargs)
    return entry


def _task(**kwargs):
    entry = copy.deepcopy(EXAMPLE_TASK)
    entry.update(kwargs)
    return entry


class JsonToEventTests(unittest.TestCase):
    def test_item(self):
        item = json_to_event(EXAMPLE_EVENT)
        self.assertEqual("go6ijb0b46hlpbu4eeu92njevo@google.com", item.id)
        self.assertEqual("event", item.type)
        self.assertEqual("Planning", item.title)
        self.assertEqual("Plan the next quarter", item.description)
        self.assertEqual("Room 1", item.location)
        self.assertEqual(["work", "a,b"], item.categories)
        self.assertEqual(
            {"etag": '"3394751574490000"', "path": "go6ijb0b46hlpbu4eeu92njevo"},
            item.metadata)

    def test_scalars(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        self.assertEqual("VEVENT", vevent.name)
        self.assertEqual(
            "go6ijb0b46hlpbu4eeu92njevo@google.com", first_value(vevent, "UID"))
        self.assertEqual("CONFIRMED", first_value(vevent, "STATUS"))
        self.assertEqual("PRIVATE", first_value(vevent, "CLASS"))
        self.assertEqual("TRANSPARENT", first_value(vevent, "TRANSP"))
        self.assertEqual(2, first_value(vevent, "SEQUENCE"))
        self.assertEqual(
            "https://www.google.com/calendar/event?eid=Z282aWpi",
            first_value(vevent, "URL"))
        self.assertEqual(
            datetime(2024, 1, 1, 8, tzinfo=timezone.utc),
            first_value(vevent, "CREATED"))
        self.assertEqual(
            datetime(2024, 1, 2, 8, tzinfo=timezone.utc),
            first_value(vevent, "LAST-MODIFIED"))
        self.assertEqual(["work", "a,b"], first_value(vevent, "CATEGORIES"))

    def test_uid_from_id(self):
        entry = _event(id="abc")
        del entry["iCalUID"]
        self.assertEqual("abc@google.com", json_to_event(entry).id)

    def test_uid_from_recurring_event_id(self):
        entry = _event(
            id="abc_20240112T090000Z",
            recurringEventId="abc",
            originalStartTime={
                "dateTime": "2024-01-12T10:00:00+01:00",
                "timeZone": "Europe/Berlin",
            })
        del entry["iCalUID"]
        item = json_to_event(entry)
        self.assertEqual("abc@google.com", item.id)
        self.assertEqual("abc_20240112T090000Z", item.metadata["path"])
        self.assertEqual(
            datetime(2024, 1, 12, 10, tzinfo=ZoneInfo("Europe/Berlin")),
            first_value(item.component, "RECURRENCE-ID"))

    def test_zoned_dates(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        dtstart = first_property(vevent, "DTSTART")
        self.assertEqual(
            datetime(2024, 1, 5, 10, tzinfo=ZoneInfo("Europe/Berlin")), dtstart.dt)
        self.assertEqual("Europe/Berlin", dtstart.params["TZID"])
        self.assertEqual(
            datetime(2024, 1, 5, 11, tzinfo=ZoneInfo("Europe/Berlin")),
            first_value(vevent, "DTEND"))

    def test_utc_dates(self):
        entry = _event(
            start={"dateTime": "2024-01-05T10:00:00+01:00"},
            end={"dateTime": "2024-01-05T11:00:00+01:00"})
        dtstart = first_property(json_to_event(entry).component, "DTSTART")
        self.assertEqual(datetime(2024, 1, 5, 9, tzinfo=timezone.utc), dtstart.dt)
        self.assertNotIn("TZID", dtstart.params)

    def test_all_day(self):
        entry = _event(start={"date": "2024-01-05"}, end={"date": "2024-01-06"})
        vevent = json_to_event(entry).component
        self.assertEqual(date(2024, 1, 5), first_value(vevent, "DTSTART"))
        self.assertEqual(date(2024, 1, 6), first_value(vevent, "DTEND"))

    def test_unknown_time_zone(self):
        entry = _event(
            start={"dateTime": "2024-01-05T10:00:00", "timeZone": "Mars/Olympus"})
        with self.assertLogs(level="WARNING"):
            vevent = json_to_event(entry).component
        dtstart = first_property(vevent, "DTSTART")
        self.assertEqual(datetime(2024, 1, 5, 10), dtstart.dt)
        self.assertEqual("Mars/Olympus", dtstart.params["TZID"])

    def test_end_time_unspecified(self):
        entry = _event(endTimeUnspecified=True)
        vevent = json_to_event(entry).component
        self.assertIsNone(first_property(vevent, "DTEND"))
        self.assertTrue(
            is_true(first_value(vevent, "X-GOOGLE-ENDTIMEUNSPECIFIED")))

    def test_organizer(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        organizer = first_property(vevent, "ORGANIZER")
        self.assertEqual("mailto:boss@example.com", str(organizer))
        self.assertEqual("The Boss", organizer.params["CN"])

    def test_attendees(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        (alice, room) = all_properties(vevent, "ATTENDEE")
        self.assertEqual("mailto:alice@example.com", str(alice))
        self.assertEqual("Alice", alice.params["CN"])
        self.assertEqual("ACCEPTED", alice.params["PARTSTAT"])
        self.assertEqual("REQ-PARTICIPANT", alice.params["ROLE"])
        self.assertEqual("INDIVIDUAL", alice.params["CUTYPE"])
        self.assertEqual("urn:id:room1", str(room))
        self.assertEqual("NEEDS-ACTION", room.params["PARTSTAT"])
        self.assertEqual("OPT-PARTICIPANT", room.params["ROLE"])
        self.assertEqual("RESOURCE", room.params["CUTYPE"])
        self.assertEqual("might be late", room.params["COMMENT"])
        self.assertEqual("2", room.params["X-NUM-GUESTS"])

    def test_recurrence(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        self.assertIsNotNone(first_property(vevent, "RRULE"))
        self.assertEqual(
            "FREQ=WEEKLY;COUNT=4", ical_text(first_property(vevent, "RRULE")))
        self.assertEqual(
            [datetime(2024, 1, 12, 10, tzinfo=ZoneInfo("Europe/Berlin"))],
            first_value(vevent, "EXDATE"))

    def test_reminders(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        (valarm,) = all_subcomponents(vevent, "VALARM")
        self.assertEqual("EMAIL", first_value(valarm, "ACTION"))
        self.assertEqual(timedelta(minutes=-30), first_value(valarm, "TRIGGER"))
        self.assertIsNone(first_value(vevent, "X-DEFAULT-ALARM"))

    def test_default_reminders(self):
        entry = _event(reminders={"useDefault": True})
        context = ConversionContext(
            default_reminders=({"method": "popup", "minutes": 10},))
        vevent = json_to_event(entry, context).component
        self.assertTrue(is_true(first_value(vevent, "X-DEFAULT-ALARM")))
        (valarm,) = all_subcomponents(vevent, "VALARM")
        self.assertTrue(is_true(first_value(valarm, "X-DEFAULT-ALARM")))
        self.assertEqual(timedelta(minutes=-10), first_value(valarm, "TRIGGER"))

    def test_default_reminders_without_site_defaults(self):
        entry = _event(reminders={"useDefault": True})
        vevent = json_to_event(entry, ConversionContext()).component
        self.assertIsNone(first_value(vevent, "X-DEFAULT-ALARM"))
        self.assertEqual([], all_subcomponents(vevent, "VALARM"))

    def test_restricted(self):
        context = ConversionContext(restricted=True, busy_title="Busy (Work)")
        item = json_to_event(EXAMPLE_EVENT, context)
        self.assertEqual("Busy (Work)", item.title)
        self.assertEqual("Busy (Work)", first_value(item.component, "SUMMARY"))

    def test_private_properties(self):
        vevent = json_to_event(EXAMPLE_EVENT).component
        self.assertEqual(
            "20240103T090000Z", ical_text(first_property(vevent, "X-MOZ-LASTACK")))
        self.assertIsNone(first_property(vevent, "X-MOZ-SNOOZE-TIME"))

    def test_recurring_snooze(self):
        entry = _event()
        entry["extendedProperties"]["private"]["X-GOOGLE-SNOOZE-RECUR"] = (
            json.dumps({"20240112T090000Z": "2024-01-12T08:50:00Z"}))
        vevent = json_to_event(entry).component
        self.assertEqual(
            "20240112T085000Z",
            ical_text(first_property(
                vevent, "X-MOZ-SNOOZE-TIME-20240112T090000Z")))

    def test_recurring_snooze_invalid(self):
        entry = _event()
        entry["extendedProperties"]["private"]["X-GOOGLE-SNOOZE-RECUR"] = "{"
        with self.assertLogs(level="WARNING"):
            item = json_to_event(entry)
        self.assertEqual("Planning", item.title)

    def test_minimal(self):
        item = json_to_event({
            "kind": "calendar#event",
            "id": "minimal",
            "start": {"date": "2024-01-05"},
        })
        self.assertEqual("minimal@google.com", item.id)
        self.assertIsNone(item.title)
        self.assertEqual([], item.categories)
        self.assertEqual(date(2024, 1, 5), first_value(item.component, "DTSTART"))


class JsonToTaskTests(unittest.TestCase):
    def test_needs_action(self):
        item = json_to_task(EXAMPLE_TASK)
        vtodo = item.component
        self.assertEqual("VTODO", vtodo.name)
        self.assertEqual("MTAxNjE3", item.id)
        self.assertEqual("task", item.type)
        self.assertEqual("Buy milk", item.title)
        self.assertEqual("Two liters", item.description)
        self.assertEqual("NEEDS-ACTION", first_value(vtodo, "STATUS"))
        self.assertIsNone(first_value(vtodo, "PERCENT-COMPLETE"))
        self.assertEqual(
            datetime(2024, 1, 5, tzinfo=timezone.utc), first_value(vtodo, "DUE"))

    def test_deleted(self):
        item = json_to_task(_task(deleted=True))
        self.assertEqual("CANCELLED", first_value(item.component, "STATUS"))
        self.assertEqual("CANCELLED", item.status)

    def test_completed(self):
        item = json_to_task(
            _task(status="completed", completed="2024-01-04T12:00:00.000Z"))
        vtodo = item.component
        self.assertEqual("COMPLETED", first_value(vtodo, "STATUS"))
        self.assertEqual(100, first_value(vtodo, "PERCENT-COMPLETE"))
        self.assertEqual(
            datetime(2024, 1, 4, 12, tzinfo=timezone.utc),
            first_value(vtodo, "COMPLETED"))

    def test_other_status(self):
        item = json_to_task(_task(status="somethingElse"))
        self.assertEqual("COMPLETED", first_value(item.component, "STATUS"))
        self.assertEqual(100, first_value(item.component, "PERCENT-COMPLETE"))

    def test_parent_and_position(self):
        vtodo = json_to_task(EXAMPLE_TASK).component
        related = first_property(vtodo, "RELATED-TO")
        self.assertEqual("MTAxNjE2", str(related))
        self.assertEqual("PARENT", related.params["RELTYPE"])
        self.assertEqual(5, first_value(vtodo, "X-GOOGLE-SORTKEY"))

    def test_large_position(self):
        vtodo = json_to_task(_task(position="99999999999999999999")).component
        self.assertEqual(
            "99999999999999999999", first_value(vtodo, "X-GOOGLE-SORTKEY"))

    def test_position_range(self):
        for position, expected in [
            ("2147483647", 2147483647),
            ("-2147483648", -2147483648),
            ("2147483648", "2147483648"),
            ("-2147483649", "-2147483649"),
            ("top", "top"),
        ]:
            vtodo = json_to_task(_task(position=position)).component
            self.assertEqual(expected, first_value(vtodo, "X-GOOGLE-SORTKEY"))

    def test_links(self):
        vtodo = json_to_task(EXAMPLE_TASK).component
        (attach,) = all_properties(vtodo, "ATTACH")
        self.assertEqual("https://mail.example.com/1", str(attach))
        self.assertEqual("Mail", attach.params["FILENAME"])
        self.assertEqual("email", attach.params["X-GOOGLE-TYPE"])


class ConversionContextTests(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(ConversionContext(False, None, ()), ConversionContext())
        self.assertEqual(
            ConversionContext(True, "Busy", ()),
            ConversionContext(restricted=True, busy_title="Busy"))


class JsonToItemTests(unittest.TestCase):
    def test_event(self):
        self.assertEqual("event", json_to_item(EXAMPLE_EVENT).type)

    def test_task(self):
        self.assertEqual("task", json_to_item(EXAMPLE_TASK).type)

    def test_unknown_kind(self):
        with self.assertLogs(level="ERROR"):
            self.assertIsNone(json_to_item({"kind": "calendar#calendar"}))


class ItemToJsonTests(unittest.TestCase):
    def test_event(self):
        entry = item_to_json(json_to_event(EXAMPLE_EVENT))
        self.assertEqual("go6ijb0b46hlpbu4eeu92njevo@google.com", entry["iCalUID"])
        self.assertEqual("Planning", entry["summary"])
        self.assertEqual("Plan the next quarter", entry["description"])
        self.assertEqual("Room 1", entry["location"])
        self.assertEqual(2, entry["sequence"])
        self.assertEqual("transparent", entry["transparency"])
        self.assertEqual("private", entry["visibility"])
        self.assertEqual("confirmed", entry["status"])
        self.assertEqual(
            {"dateTime": "2024-01-05T10:00:00", "timeZone": "Europe/Berlin"},
            entry["start"])
        self.assertEqual(
            {"dateTime": "2024-01-05T11:00:00", "timeZone": "Europe/Berlin"},
            entry["end"])
        self.assertNotIn("endTimeUnspecified", entry)
        self.assertEqual(
            {"useDefault": False, "overrides": [{"method": "email", "minutes": 30}]},
            entry["reminders"])
        self.assertEqual(
            {
                "shared": {"X-MOZ-CATEGORIES": "work,a\\,b"},
                "private": {"X-MOZ-LASTACK": "20240103T090000Z"},
            },
            entry["extendedProperties"])
        self.assertEqual(2, len(entry["recurrence"]))
        self.assertIn("RRULE:FREQ=WEEKLY;COUNT=4", entry["recurrence"])

    def test_event_attendees(self):
        entry = item_to_json(json_to_event(EXAMPLE_EVENT))
        self.assertEqual(
            [
                {
                    "displayName": "Alice",
                    "email": "alice@example.com",
                    "optional": False,
                    "resource": False,
                    "responseStatus": "accepted",
                },
                {
                    "id": "room1",
                    "optional": True,
                    "resource": True,
                    "responseStatus": "needsAction",
                    "comment": "might be late",
                    "additionalGuests": 2,
                },
            ],
            entry["attendees"])

    def test_all_day(self):
        entry = item_to_json(json_to_event(
            _event(start={"date": "2024-01-05"}, end={"date": "2024-01-06"})))
        self.assertEqual({"date": "2024-01-05"}, entry["start"])
        self.assertEqual({"date": "2024-01-06"}, entry["end"])

    def test_utc(self):
        entry = item_to_json(json_to_event(
            _event(start={"dateTime": "2024-01-05T10:00:00Z"})))
        self.assertEqual({"dateTime": "2024-01-05T10:00:00Z"}, entry["start"])

    def test_end_time_unspecified(self):
        entry = item_to_json(json_to_event(_event(endTimeUnspecified=True)))
        self.assertTrue(entry["endTimeUnspecified"])
        self.assertNotIn("end", entry)

    def test_default_reminders(self):
        context = ConversionContext(
            default_reminders=({"method": "popup", "minutes": 10},))
        entry = item_to_json(
            json_to_event(_event(reminders={"useDefault": True}), context))
        self.assertEqual({"useDefault": True}, entry["reminders"])

    def test_cancelled(self):
        item = json_to_event(_event(status="cancelled"))
        self.assertRaises(CancelledItemError, item_to_json, item)

    def test_empty_event(self):
        self.assertEqual({}, item_to_json(CalendarItem.empty("event")))

    def test_task(self):
        entry = item_to_json(json_to_task(EXAMPLE_TASK))
        self.assertEqual(
            {
                "id": "MTAxNjE3",
                "title": "Buy milk",
                "notes": "Two liters",
                "status": "needsAction",
                "due": "2024-01-05T00:00:00.000Z",
            },
            entry)

    def test_completed_task(self):
        entry = item_to_json(json_to_task(
            _task(status="completed", completed="2024-01-04T12:00:00.000Z")))
        self.assertEqual("completed", entry["status"])
        self.assertEqual("2024-01-04T12:00:00.000Z", entry["completed"])

    def test_unsupported_type(self):
        item = json_to_task(EXAMPLE_TASK)
        item.type = "journal"
        self.assertRaises(UnsupportedItemType, item_to_json, item)
