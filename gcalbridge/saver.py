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

"""Reconciliation of incoming Google changes into a store.

A stream is the JSON document returned by an events or tasks list call.
Every record in it is converted and committed on its own, so a single
broken record does not keep the rest of the stream from being saved.
"""

import asyncio
import collections
import logging

from .items import ConversionContext, json_to_item
from .store import NoSuchItem

STREAM_KIND_EVENTS = "calendar#events"
STREAM_KIND_TASKS = "tasks#tasks"

logger = logging.getLogger(__name__)


ReconcileStats = collections.namedtuple(
    "ReconcileStats", ["masters", "exceptions", "failed"]
)


class UnsupportedStreamType(Exception):
    """Stream kind is neither an events nor a tasks list."""

    def __init__(self, kind):
        super().__init__(f"Invalid stream type: {kind}")
        self.kind = kind


class ItemSaver(object):
    """Save the records of Google streams to a store."""

    def __init__(self, store, settings, calendar_name=None):
        self.store = store
        self.settings = settings
        self.calendar_name = calendar_name
        self.master_items = {}
        self.exception_items = []
        self.failed = 0

    def read_context(self) -> ConversionContext:
        """Read the settings that apply to a whole stream."""
        restricted = self.settings.is_restricted()
        return ConversionContext(
            restricted=restricted,
            busy_title=(self.settings.get_busy_title(self.calendar_name)
                        if restricted else None),
            default_reminders=tuple(self.settings.get_default_reminders()),
        )

    async def parse_item_stream(self, data):
        """Save all records of a stream.

        :raise UnsupportedStreamType: if the stream kind is not supported
        """
        kind = data.get("kind")
        if kind == STREAM_KIND_EVENTS:
            await self.parse_event_stream(data)
        elif kind == STREAM_KIND_TASKS:
            await self.parse_task_stream(data)
        else:
            raise UnsupportedStreamType(kind)

    async def parse_event_stream(self, data):
        if data.get("timeZone"):
            logger.info("Timezone from event stream is %s", data["timeZone"])
            self.settings.set_timezone(data["timeZone"])

        items = data.get("items") or []
        if not items:
            logger.info("No events have been changed")
            return
        logger.info("Parsing %d received events", len(items))

        context = self.read_context()
        await asyncio.gather(
            *(self._save_event(entry, context) for entry in items))

    async def _save_event(self, entry, context):
        try:
            item = json_to_item(entry, context)
            if item is None:
                return
            if entry.get("originalStartTime"):
                # Committed on their own; they are not linked to their
                # master event.
                self.exception_items.append(item)
            else:
                self.master_items[item.id] = item
            await self.commit_item(item)
        except Exception:
            self.failed += 1
            logger.exception("Failed to save event %s", entry.get("id"))

    async def parse_task_stream(self, data):
        items = data.get("items") or []
        if not items:
            logger.info("No tasks have been changed")
            return
        logger.info("Parsing %d received tasks", len(items))

        await asyncio.gather(*(self._save_task(entry) for entry in items))

    async def _save_task(self, entry):
        try:
            item = json_to_item(entry)
            if item is None:
                return
            self.master_items[item.id] = item
            await self.commit_item(item)
        except Exception:
            self.failed += 1
            logger.exception("Failed to save task %s", entry.get("id"))

    async def parse_item(self, entry):
        """Save a single record of any kind.

        Returns: the converted item, or None if the record kind is unknown
        """
        item = json_to_item(entry, self.read_context())
        if item is not None:
            await self.commit_item(item)
        return item

    async def commit_item(self, item):
        if item.status == "CANCELLED":
            try:
                await self.store.remove(item.id)
            except NoSuchItem:
                logger.debug("Cancelled item %s was not stored", item.id)
        else:
            await self.store.upsert(item)

    def complete(self) -> ReconcileStats:
        """Finish a sync run.

        Returns: a `ReconcileStats`
        """
        if self.exception_items:
            logger.info(
                "Saved %d exceptions as separate items, without linking "
                "them to their master event", len(self.exception_items))
        if self.failed:
            logger.warning("Failed to save %d items", self.failed)
        return ReconcileStats(
            masters=len(self.master_items),
            exceptions=len(self.exception_items),
            failed=self.failed,
        )
