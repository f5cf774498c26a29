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

"""Conversion between iCalendar items and Google Calendar/Tasks records.

Calendar items are represented as ``CalendarItem`` instances wrapping an
iCalendar tree; see gcalbridge.items for the conversion from and to the
Google JSON records, and gcalbridge.patch for building minimal patches.
"""

from typing import Optional

from icalendar.cal import Calendar, Component, Event, Todo

from .component import first_subcomponent, first_value, new_calendar

__version__ = (0, 1, 0)

ITEM_TYPE_EVENT = "event"
ITEM_TYPE_TASK = "task"
VALID_ITEM_TYPES = (ITEM_TYPE_EVENT, ITEM_TYPE_TASK)

# Name of the item component in the iCalendar tree, by item type.
ITEM_COMPONENT_NAMES = {
    ITEM_TYPE_EVENT: "VEVENT",
    ITEM_TYPE_TASK: "VTODO",
}
ITEM_COMPONENT_CLASSES = {
    ITEM_TYPE_EVENT: Event,
    ITEM_TYPE_TASK: Todo,
}


class UnsupportedItemType(Exception):
    """Item type is neither an event nor a task."""

    def __init__(self, item_type) -> None:
        super().__init__(f"Unknown item type: {item_type}")
        self.item_type = item_type


class MissingComponent(Exception):
    """The iCalendar tree of an item lacks its item component."""

    def __init__(self, component_name: str, toplevel: Optional[str]) -> None:
        super().__init__(
            f"Missing {component_name.lower()} in toplevel component {toplevel}"
        )
        self.component_name = component_name
        self.toplevel = toplevel


def check_item_type(item_type) -> str:
    """Check that an item type is supported.

    :raise UnsupportedItemType: if it is not
    Returns: the item type
    """
    if item_type not in VALID_ITEM_TYPES:
        raise UnsupportedItemType(item_type)
    return item_type


def item_type_for_component(name: str) -> str:
    for item_type, component_name in ITEM_COMPONENT_NAMES.items():
        if component_name == name:
            return item_type
    raise UnsupportedItemType(name)


class CalendarItem:
    """A calendar item: an event or a task, with its iCalendar tree."""

    def __init__(
        self,
        id: Optional[str],
        type: str,
        calendar: Component,
        title: Optional[str] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        categories: Optional[list[str]] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        self.id = id
        self.type = check_item_type(type)
        self.calendar = calendar
        self.title = title
        self.description = description
        self.location = location
        self.categories = list(categories or [])
        self.metadata = dict(metadata or {})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, type={self.type!r}, title={self.title!r})"

    @classmethod
    def from_calendar(cls, calendar: Calendar, metadata=None) -> "CalendarItem":
        """Create an item from a calendar holding a single event or task.

        :raise UnsupportedItemType: if the calendar holds neither
        """
        for component in calendar.subcomponents:
            if component.name in ITEM_COMPONENT_NAMES.values():
                break
        else:
            raise UnsupportedItemType(
                [c.name for c in calendar.subcomponents] or calendar.name
            )
        return cls(
            id=first_value(component, "UID"),
            type=item_type_for_component(component.name),
            calendar=calendar,
            title=first_value(component, "SUMMARY"),
            description=first_value(component, "DESCRIPTION"),
            location=first_value(component, "LOCATION"),
            categories=first_value(component, "CATEGORIES"),
            metadata=metadata,
        )

    @classmethod
    def from_ical(cls, data: bytes, metadata=None) -> "CalendarItem":
        return cls.from_calendar(Calendar.from_ical(data), metadata=metadata)

    @classmethod
    def empty(cls, item_type: str) -> "CalendarItem":
        """Create an item without any properties, to diff new items against."""
        item_type = check_item_type(item_type)
        component = ITEM_COMPONENT_CLASSES[item_type]()
        return cls(id=None, type=item_type, calendar=new_calendar(component))

    @property
    def component(self) -> Component:
        """The VEVENT or VTODO of this item.

        :raise MissingComponent: if the tree does not contain one
        """
        name = ITEM_COMPONENT_NAMES[check_item_type(self.type)]
        if self.calendar.name == name:
            return self.calendar
        component = first_subcomponent(self.calendar, name)
        if component is None:
            raise MissingComponent(name, self.calendar.name)
        return component

    @property
    def status(self) -> Optional[str]:
        status = first_value(self.component, "STATUS")
        if status is None:
            return None
        return status.upper()

    def to_ical(self) -> bytes:
        return self.calendar.to_ical()
