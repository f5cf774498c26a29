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

"""In-memory store."""

from . import ItemStore, NoSuchItem


class MemoryItemStore(ItemStore):
    """Pure in-memory store."""

    def __init__(self):
        self._items = {}

    def __repr__(self):
        return f"{type(self).__name__}()"

    async def upsert(self, item):
        self._items[item.id] = item

    async def remove(self, item_id):
        try:
            del self._items[item_id]
        except KeyError:
            raise NoSuchItem(item_id)

    def get(self, item_id):
        try:
            return self._items[item_id]
        except KeyError:
            raise NoSuchItem(item_id)

    def iter_ids(self):
        return iter(list(self._items))
