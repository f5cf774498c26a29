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

"""gcalbridge command-line handling."""

import argparse
import asyncio
import json
import logging
import sys

from . import CalendarItem, __version__


# If no subparser is given, default to 'sync'
def set_default_subparser(self, argv, name):
    subparser_found = False
    for arg in argv:
        if arg in ["-h", "--help", "--version"]:
            break
    else:
        for x in self._subparsers._actions:
            if not isinstance(x, argparse._SubParsersAction):
                continue
            for sp_name in x._name_parser_map.keys():
                if sp_name in argv:
                    subparser_found = True
        if not subparser_found:
            print('No subcommand given, defaulting to "%s"' % name)
            argv.insert(0, name)


def read_item(path):
    with open(path, "rb") as f:
        return CalendarItem.from_ical(f.read())


async def sync(args):
    from .config import FileBasedSyncSettings
    from .saver import ItemSaver
    from .store import STORE_TYPE_GIT, STORE_TYPE_VDIR, open_store

    if args.config:
        settings = FileBasedSyncSettings.from_path(args.config)
    else:
        settings = FileBasedSyncSettings()
    store = open_store(
        args.directory, STORE_TYPE_GIT if args.git else STORE_TYPE_VDIR)
    saver = ItemSaver(store, settings, calendar_name=args.calendar_name)
    for path in args.streams:
        with open(path) as f:
            data = json.load(f)
        await saver.parse_item_stream(data)
    stats = saver.complete()
    logging.info(
        "Saved %d items and %d exceptions, %d failures",
        stats.masters, stats.exceptions, stats.failed)
    return 1 if stats.failed else 0


def export(args):
    from .items import item_to_json

    json.dump(item_to_json(read_item(args.item)), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def diff(args):
    from .patch import MustDelete, patch_item

    result = patch_item(read_item(args.new), read_item(args.old))
    if isinstance(result, MustDelete):
        print(f"Item {result.item_id} was cancelled and must be deleted")
        return 0
    json.dump(result.entry, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


async def main(argv):
    parser = argparse.ArgumentParser()

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + ".".join(map(str, __version__)),
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--debug", action="store_true", help="Print debug messages.")

    subparsers = parser.add_subparsers(help="Subcommands", dest="subcommand")
    sync_parser = subparsers.add_parser(
        "sync", parents=[common], usage="%(prog)s -d DIR [OPTIONS] STREAM...",
        help="Save Google event or task streams")
    sync_parser.add_argument(
        "-d", "--directory", required=True,
        help="Directory to store items in.")
    sync_parser.add_argument(
        "-c", "--config", help="Settings file.")
    sync_parser.add_argument(
        "--git", action="store_true",
        help="Store items in a bare git repository.")
    sync_parser.add_argument(
        "--calendar-name", default=None,
        help="Calendar name to use in the busy title.")
    sync_parser.add_argument(
        "streams", nargs="+", metavar="STREAM",
        help="JSON file with an events or tasks list response.")

    export_parser = subparsers.add_parser(
        "export", parents=[common],
        help="Print the Google record for an iCalendar file")
    export_parser.add_argument("item", help="iCalendar file")

    diff_parser = subparsers.add_parser(
        "diff", parents=[common],
        help="Print the patch between two versions of an item")
    diff_parser.add_argument("old", help="Old iCalendar file")
    diff_parser.add_argument("new", help="New iCalendar file")

    set_default_subparser(parser, argv, "sync")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "debug", False) else logging.INFO,
        format="%(message)s")

    if args.subcommand == "sync":
        return await sync(args)
    elif args.subcommand == "export":
        return export(args)
    elif args.subcommand == "diff":
        return diff(args)
    else:
        parser.print_help()
        return 1


def cli():
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    cli()
