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

"""Synchronization settings file.

Example::

    [DEFAULT]
    access-role = freeBusyReader
    timezone = Europe/Berlin

    [reminders]
    default = popup:10, email:30

    [messages]
    busy-title = Busy ({calendar})
"""

import configparser

from .alarms import clamp_minutes
from .lookup import ALARM_ACTION

DEFAULT_BUSY_TITLE = "Busy"

# Access role that only allows reading free/busy information.
RESTRICTED_ACCESS_ROLE = "freeBusyReader"


class InvalidSettings(Exception):
    """The settings file contains an invalid value."""


class SyncSettings(object):
    """Settings for a synchronized calendar."""

    def is_restricted(self):
        """Check whether only free/busy information may be shown."""
        raise NotImplementedError(self.is_restricted)

    def get_default_reminders(self):
        """Get the default reminders of the calendar.

        Returns: list of reminder override dicts
        """
        raise NotImplementedError(self.get_default_reminders)

    def get_busy_title(self, calendar_name):
        raise NotImplementedError(self.get_busy_title)

    def get_timezone(self):
        raise NotImplementedError(self.get_timezone)

    def set_timezone(self, tzid):
        raise NotImplementedError(self.set_timezone)


def parse_reminders(text):
    """Parse a list of reminders like "popup:10, email:30".

    :raise InvalidSettings: if an entry can not be parsed
    """
    reminders = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        method, sep, minutes = part.partition(":")
        method = method.strip()
        if not sep or method not in ALARM_ACTION:
            raise InvalidSettings(f"invalid reminder {part!r}")
        try:
            minutes = int(minutes)
        except ValueError:
            raise InvalidSettings(f"invalid reminder minutes in {part!r}")
        reminders.append({"method": method, "minutes": clamp_minutes(minutes)})
    return reminders


class FileBasedSyncSettings(SyncSettings):
    """Settings stored in an INI style file."""

    def __init__(self, cp=None, save=None):
        if cp is None:
            cp = configparser.ConfigParser(interpolation=None)
        self._configparser = cp
        self._save_cb = save

    def _save(self, message):
        if self._save_cb is None:
            return
        self._save_cb(self._configparser, message)

    @classmethod
    def from_file(cls, f, save=None):
        cp = configparser.ConfigParser(interpolation=None)
        cp.read_file(f)
        return cls(cp, save=save)

    @classmethod
    def from_path(cls, path):
        """Load settings from a path, writing them back on change."""

        def save(cp, message):
            with open(path, "w") as f:
                cp.write(f)

        cp = configparser.ConfigParser(interpolation=None)
        cp.read([path])
        return cls(cp, save=save)

    def is_restricted(self):
        role = self._configparser["DEFAULT"].get("access-role")
        return role == RESTRICTED_ACCESS_ROLE

    def set_access_role(self, role):
        if role is not None:
            self._configparser["DEFAULT"]["access-role"] = role
        else:
            self._configparser.remove_option("DEFAULT", "access-role")
        self._save("Set access role.")

    def get_default_reminders(self):
        try:
            text = self._configparser["reminders"]["default"]
        except KeyError:
            return []
        return parse_reminders(text)

    def get_busy_title(self, calendar_name):
        try:
            title = self._configparser["messages"]["busy-title"]
        except KeyError:
            return DEFAULT_BUSY_TITLE
        return title.format(calendar=calendar_name or "")

    def get_timezone(self):
        return self._configparser["DEFAULT"].get("timezone")

    def set_timezone(self, tzid):
        if tzid == self.get_timezone():
            return
        if tzid is not None:
            self._configparser["DEFAULT"]["timezone"] = tzid
        else:
            self._configparser.remove_option("DEFAULT", "timezone")
        self._save("Set time zone.")
