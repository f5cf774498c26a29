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

"""Categories string handling.

Google Calendar has no native categories, so they are stored as a single
comma separated string in a shared extended property. Commas inside a
category are escaped with a backslash.
"""

import re
from collections.abc import Iterable
from typing import Optional

CATEGORIES_KEY = "X-MOZ-CATEGORIES"

_SEPARATOR_RE = re.compile(r"(?<!\\),")


def categories_string_to_array(categories: Optional[str]) -> list[str]:
    if not categories:
        return []
    return [
        cat.replace("\\,", ",")
        for cat in _SEPARATOR_RE.split(categories)
        if cat
    ]


def array_to_categories_string(categories: Optional[Iterable[str]]) -> str:
    return ",".join(cat.replace(",", "\\,") for cat in categories or [])
