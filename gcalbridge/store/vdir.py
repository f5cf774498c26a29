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

"""vdir store.

See https://vdirsyncer.readthedocs.io/en/latest/vdir.html
"""

import errno
import logging
import os

from .. import CalendarItem
from . import ItemStore, NoSuchItem, item_filename, item_id_from_filename

logger = logging.getLogger(__name__)


class VdirItemStore(ItemStore):
    """A store backed by a directory of iCalendar files."""

    def __init__(self, path):
        self.path = path

    def __repr__(self):
        return f"{type(self).__name__}({self.path!r})"

    async def upsert(self, item):
        name = item_filename(item.id)
        path = os.path.join(self.path, name)
        tmppath = os.path.join(self.path, name + ".tmp")
        with open(tmppath, "wb") as f:
            f.write(item.to_ical())
        os.replace(tmppath, path)
        logger.debug("Wrote %s", path)

    async def remove(self, item_id):
        path = os.path.join(self.path, item_filename(item_id))
        try:
            os.unlink(path)
        except OSError as e:
            if e.errno == errno.ENOENT:
                raise NoSuchItem(item_id)
            raise

    def get(self, item_id):
        path = os.path.join(self.path, item_filename(item_id))
        try:
            with open(path, "rb") as f:
                return CalendarItem.from_ical(f.read())
        except OSError as e:
            if e.errno == errno.ENOENT:
                raise NoSuchItem(item_id)
            raise

    def iter_ids(self):
        for name in sorted(os.listdir(self.path)):
            item_id = item_id_from_filename(name)
            if item_id is not None:
                yield item_id

    @classmethod
    def create(cls, path):
        """Create a new store backed by a directory on disk.

        :return: A `VdirItemStore`
        """
        os.mkdir(path)
        return cls(path)

    @classmethod
    def open_from_path(cls, path):
        return cls(path)
