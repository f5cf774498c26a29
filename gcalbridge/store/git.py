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

"""Git store.

Items are kept in a bare git repository, with a commit for every change.
"""

import logging
import os
import stat
import time

import dulwich.repo
from dulwich.objects import Blob, Commit, Tree

from .. import CalendarItem
from . import (
    DEFAULT_ENCODING,
    ItemStore,
    NoSuchItem,
    item_filename,
    item_id_from_filename,
)

DEFAULT_IDENTITY = b"gcalbridge <gcalbridge@localhost>"

logger = logging.getLogger(__name__)


class BareGitItemStore(ItemStore):
    """A store backed by a bare git repository."""

    def __init__(self, repo, ref=b"refs/heads/master", identity=DEFAULT_IDENTITY):
        self.repo = repo
        self.ref = ref
        self.identity = identity

    def __repr__(self):
        return f"{type(self).__name__}({self.repo!r}, ref={self.ref!r})"

    def _get_current_tree(self):
        try:
            ref_object = self.repo[self.ref]
        except KeyError:
            return Tree()
        return self.repo.object_store[ref_object.tree]

    def _commit_tree(self, tree_id, message):
        commit = Commit()
        commit.tree = tree_id
        try:
            commit.parents = [self.repo.refs[self.ref]]
        except KeyError:
            commit.parents = []
        commit.author = commit.committer = self.identity
        commit.author_time = commit.commit_time = int(time.time())
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = DEFAULT_ENCODING.encode("ascii")
        commit.message = message.encode(DEFAULT_ENCODING)
        self.repo.object_store.add_object(commit)
        self.repo.refs[self.ref] = commit.id
        return commit.id

    async def upsert(self, item):
        b = Blob.from_string(item.to_ical())
        tree = self._get_current_tree()
        old_tree_id = tree.id
        name_enc = item_filename(item.id).encode(DEFAULT_ENCODING)
        tree[name_enc] = (0o644 | stat.S_IFREG, b.id)
        self.repo.object_store.add_objects([(tree, None), (b, None)])
        if tree.id != old_tree_id:
            self._commit_tree(tree.id, f"Update {item.id}")
        else:
            logger.debug("Item %s did not change", item.id)

    async def remove(self, item_id):
        tree = self._get_current_tree()
        name_enc = item_filename(item_id).encode(DEFAULT_ENCODING)
        try:
            tree[name_enc]
        except KeyError:
            raise NoSuchItem(item_id)
        del tree[name_enc]
        self.repo.object_store.add_objects([(tree, None)])
        self._commit_tree(tree.id, f"Delete {item_id}")

    def get(self, item_id):
        tree = self._get_current_tree()
        name_enc = item_filename(item_id).encode(DEFAULT_ENCODING)
        try:
            (mode, sha) = tree[name_enc]
        except KeyError:
            raise NoSuchItem(item_id)
        return CalendarItem.from_ical(self.repo.object_store[sha].as_raw_string())

    def iter_ids(self):
        for entry in self._get_current_tree().items():
            item_id = item_id_from_filename(entry.path.decode(DEFAULT_ENCODING))
            if item_id is not None:
                yield item_id

    @classmethod
    def create_memory(cls):
        """Create a new store backed by a memory repository.

        :return: A `BareGitItemStore`
        """
        return cls(dulwich.repo.MemoryRepo())

    @classmethod
    def create(cls, path):
        """Create a new store backed by a bare git repository on disk.

        :return: A `BareGitItemStore`
        """
        os.mkdir(path)
        return cls(dulwich.repo.Repo.init_bare(path))

    @classmethod
    def open_from_path(cls, path):
        return cls(dulwich.repo.Repo(path))
