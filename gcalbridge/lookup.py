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

"""Fixed lookup tables between Google and iCalendar tokens."""

from types import MappingProxyType
from typing import Optional


class Lookup:
    """An immutable bidirectional table with a default entry.

    Values outside the declared domain map to the default in both
    directions.
    """

    def __init__(self, mapping: dict[str, str], default: str) -> None:
        if default not in mapping:
            raise ValueError(f"default {default!r} not in mapping")
        reverse = {v: k for (k, v) in mapping.items()}
        if len(reverse) != len(mapping):
            raise ValueError("mapping is not bijective")
        self._forward = MappingProxyType(dict(mapping))
        self._reverse = MappingProxyType(reverse)
        self.default = default

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._forward)!r}, {self.default!r})"

    def __iter__(self):
        return iter(self._forward)

    def __len__(self) -> int:
        return len(self._forward)

    def to_ical(self, value: Optional[str]) -> str:
        """Map an external value to its iCalendar token."""
        try:
            return self._forward[value]
        except KeyError:
            return self._forward[self.default]

    def from_ical(self, token: Optional[str]) -> str:
        """Map an iCalendar token back to the external value."""
        if token is not None:
            token = str(token).upper()
        try:
            return self._reverse[token]
        except KeyError:
            return self.default


ATTENDEE_STATUS = Lookup(
    {
        "needsAction": "NEEDS-ACTION",
        "declined": "DECLINED",
        "tentative": "TENTATIVE",
        "accepted": "ACCEPTED",
    },
    default="needsAction",
)

ALARM_ACTION = Lookup(
    {
        "email": "EMAIL",
        "popup": "DISPLAY",
    },
    default="popup",
)
