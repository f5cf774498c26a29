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

"""Destination stores for synchronized items.

Every item is stored as a single iCalendar file, named after its id.
"""

import os
from typing import Iterator, Optional
from urllib.parse import quote, unquote

from .. import CalendarItem

DEFAULT_ENCODING = "utf-8"

EXTENSION = ".ics"

STORE_TYPE_VDIR = "vdir"
STORE_TYPE_GIT = "git"
STORE_TYPE_MEMORY = "memory"
VALID_STORE_TYPES = (STORE_TYPE_VDIR, STORE_TYPE_GIT, STORE_TYPE_MEMORY)


class NoSuchItem(Exception):
    """No such item."""

    def __init__(self, item_id):
        super().__init__(f"No such item: {item_id}")
        self.item_id = item_id


def item_filename(item_id: str) -> str:
    """Return the name of the file an item is stored in."""
    return quote(item_id, safe="@") + EXTENSION


def item_id_from_filename(name: str) -> Optional[str]:
    if not name.endswith(EXTENSION):
        return None
    return unquote(name[: -len(EXTENSION)])


class ItemStore(object):
    """A destination for synchronized items."""

    async def upsert(self, item: CalendarItem) -> None:
        """Add an item, or replace the item with the same id."""
        raise NotImplementedError(self.upsert)

    async def remove(self, item_id: str) -> None:
        """Remove an item.

        :raise NoSuchItem: when the item doesn't exist
        """
        raise NotImplementedError(self.remove)

    def get(self, item_id: str) -> CalendarItem:
        """Retrieve an item.

        :raise NoSuchItem: when the item doesn't exist
        """
        raise NotImplementedError(self.get)

    def iter_ids(self) -> Iterator[str]:
        raise NotImplementedError(self.iter_ids)

    def iter_items(self) -> Iterator[CalendarItem]:
        for item_id in self.iter_ids():
            yield self.get(item_id)


def open_store(path: str, store_type: str = STORE_TYPE_VDIR) -> ItemStore:
    """Open the store at path, creating it if it does not exist yet.

    :raise ValueError: for an unknown store type
    """
    if store_type == STORE_TYPE_VDIR:
        from .vdir import VdirItemStore as cls
    elif store_type == STORE_TYPE_GIT:
        from .git import BareGitItemStore as cls
    elif store_type == STORE_TYPE_MEMORY:
        from .memory import MemoryItemStore

        return MemoryItemStore()
    else:
        raise ValueError(f"unknown store type {store_type!r}")
    if os.path.exists(path):
        return cls.open_from_path(path)
    return cls.create(path)
