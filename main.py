"""CLI entrypoint for the Polyshape admin client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from admin_view import RecordView
from config import RECORD_KINDS, resource_config
from forms import filename_from_pathname
from models import EnrichedItem, Loaded, Projection

# CLI flag -> form attribute, per record kind.
_FORM_FLAGS: dict[str, dict[str, str]] = {
    "publications": {
        "title": "title",
        "content": "content",
        "date": "date",
        "url": "publication_url",
        "authors": "authors",
        "venue": "venue",
    },
    "projects": {
        "title": "title",
        "content": "content",
        "date": "date",
        "partner_name": "partner_name",
        "partner_url": "partner_url",
    },
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Manage publications and projects through the admin API")
    parser.add_argument(
        "--style",
        choices=["legacy", "rest"],
        default=None,
        help="Endpoint style (defaults to POLYSHAPE_ENDPOINT_STYLE or 'legacy')",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List records, newest first")
    list_cmd.add_argument("kind", choices=RECORD_KINDS)
    list_cmd.add_argument("--search", default="", help="Case-insensitive title filter")
    list_cmd.add_argument("--page", type=int, default=1, help="Page number (clamped into range)")

    create_cmd = sub.add_parser("create", help="Create a record")
    create_cmd.add_argument("kind", choices=RECORD_KINDS)
    _add_form_flags(create_cmd)

    edit_cmd = sub.add_parser("edit", help="Edit a record; unset fields keep their current value")
    edit_cmd.add_argument("kind", choices=RECORD_KINDS)
    edit_cmd.add_argument("target", help="Filename or pathname of the record")
    _add_form_flags(edit_cmd)

    delete_cmd = sub.add_parser("delete", help="Delete a record")
    delete_cmd.add_argument("kind", choices=RECORD_KINDS)
    delete_cmd.add_argument("target", help="Filename or pathname of the record")

    return parser.parse_args(argv)


def _add_form_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--title")
    cmd.add_argument("--content", help="Paragraphs separated by blank lines")
    cmd.add_argument("--date", help="YYYY-MM-DD")
    cmd.add_argument("--url", help="Publication URL (publications)")
    cmd.add_argument("--authors", help="Comma-separated authors (publications)")
    cmd.add_argument("--venue", help="Venue (publications)")
    cmd.add_argument("--partner-name", help="Partner name (projects)")
    cmd.add_argument("--partner-url", help="Partner URL (projects)")


def _apply_form_flags(form: object, kind: str, args: argparse.Namespace) -> None:
    for flag, attr in _FORM_FLAGS[kind].items():
        value = getattr(args, flag, None)
        if value is not None:
            setattr(form, attr, value.replace("\\n", "\n"))


def format_item(item: EnrichedItem) -> str:
    name = filename_from_pathname(item.pathname)
    if item.detail is not None:
        date = item.detail.date or "no date"
        return f"{date}  {item.detail.title}  [{name}]"
    if item.error:
        return f"{name}  Error: {item.error}"
    return f"{name}  (loading)"


def format_page(projection: Projection) -> str:
    lines = [format_item(item) for item in projection.visible]
    if not lines:
        lines.append("No matching records.")
    lines.append(
        f"Page {projection.current_page}/{projection.total_pages} "
        f"({projection.total_items} records)"
    )
    return "\n".join(lines)


async def run_list(view: RecordView, search: str, page: int) -> int:
    state = await view.load()
    if not isinstance(state, Loaded):
        logging.error("Failed to load %s: %s", view.kind.name, view.error)
        return 1
    view.set_search(search)
    print(format_page(view.set_page(page)))
    return 0


async def run_create(view: RecordView, args: argparse.Namespace) -> int:
    view.mutations.open_create()
    _apply_form_flags(view.mutations.session.form, view.kind.name, args)
    if not await view.mutations.submit():
        logging.error("Create failed: %s", view.mutations.session.error)
        return 1
    logging.info("Created %s; %s records after reload", view.kind.label, len(view.items))
    return 0


async def run_edit(view: RecordView, target: str, args: argparse.Namespace) -> int:
    state = await view.load()
    if not isinstance(state, Loaded):
        logging.error("Failed to load %s: %s", view.kind.name, view.error)
        return 1
    item = view.find(target)
    if item is None or not view.mutations.open_edit(item):
        logging.error("No editable %s found for %s", view.kind.label, target)
        return 1
    _apply_form_flags(view.mutations.session.form, view.kind.name, args)
    if not await view.mutations.submit():
        logging.error("Update failed: %s", view.mutations.session.error)
        return 1
    logging.info("Updated %s", target)
    return 0


async def run_delete(view: RecordView, target: str) -> int:
    pathname = target
    if "/" not in target:
        await view.load()
        item = view.find(target)
        if item is not None:
            pathname = item.pathname
    view.mutations.request_delete(pathname)
    if not await view.mutations.delete(pathname):
        logging.error("Delete failed: %s", view.mutations.error)
        return 1
    logging.info("Deleted %s", target)
    return 0


async def run(args: argparse.Namespace) -> int:
    """Execute one command against a fresh view."""
    async with RecordView(args.kind, resource=resource_config(args.kind, style=args.style)) as view:
        if args.command == "list":
            return await run_list(view, args.search, args.page)
        if args.command == "create":
            return await run_create(view, args)
        if args.command == "edit":
            return await run_edit(view, args.target, args)
        return await run_delete(view, args.target)


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute one command."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
