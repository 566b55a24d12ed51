"""Command-line rendering of json-template pages.

Usage::

    python -m jsonbind render page.html
    python -m jsonbind render page.html --data people.json --container people -v

The page is parsed, every bound container is connected (which renders it
once), pending source mutations are flushed and the resulting document is
written to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn, TextIO

from jsonbind.dom.document import Document
from jsonbind.dom.serializer import to_html
from jsonbind.engine.template import bind_document, is_bound
from jsonbind.environment.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNREADABLE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonbind",
        description="Render json-template containers in an HTML page.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    render = commands.add_parser("render", help="render a page and print the result")
    render.add_argument("page", type=Path, help="HTML page with bound containers")
    render.add_argument(
        "--data",
        type=Path,
        help="JSON file whose text replaces the data source of every rendered container",
    )
    render.add_argument("--container", metavar="ID", help="only render the container with this id")
    render.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("cannot read %s: %s", path, exc)
        return None


def _replace_sources(document: Document, data: str, container_id: str | None) -> None:
    """Overwrite the text of each source referenced by a container."""
    config = DEFAULT_CONFIG
    for element in document.iter_elements():
        if container_id is not None and element.id != container_id:
            continue
        if not is_bound(element, config):
            continue
        source_id = element.get_attribute(config.source_attr)
        source = document.get_element_by_id(source_id) if source_id else None
        if source is not None:
            source.text_content = data


def render_page(
    page: str,
    *,
    data: str | None = None,
    container_id: str | None = None,
) -> tuple[str, int]:
    """Render ``page`` and return (html, connected container count)."""
    document = Document.from_html(page)
    if data is not None:
        _replace_sources(document, data, container_id)
    bindings = bind_document(document, container_id=container_id)
    document.flush_mutations()
    connected = sum(1 for b in bindings if b.connected)
    for binding in bindings:
        binding.disconnect()
    return to_html(document), connected


def cmd_render(ns: argparse.Namespace, out: TextIO) -> int:
    page = _read(ns.page)
    if page is None:
        return EXIT_UNREADABLE
    data = None
    if ns.data is not None:
        data = _read(ns.data)
        if data is None:
            return EXIT_UNREADABLE

    html, connected = render_page(page, data=data, container_id=ns.container)
    if ns.container is not None and connected == 0:
        logger.error("container %r was not rendered", ns.container)
        return EXIT_FAILURE
    out.write(html)
    if not html.endswith("\n"):
        out.write("\n")
    return EXIT_OK


def run(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """Parse ``argv`` and execute the chosen command. Returns an exit code."""
    ns = _build_parser().parse_args(argv)
    _configure_logging(ns.verbose)
    if ns.command == "render":
        return cmd_render(ns, out or sys.stdout)
    return EXIT_FAILURE


def main() -> NoReturn:
    """Entry point for ``python -m jsonbind``."""
    try:
        raise SystemExit(run(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.error("Interrupted by user.")
        raise SystemExit(130) from None
    except BrokenPipeError:
        raise SystemExit(EXIT_OK) from None


if __name__ == "__main__":
    main()
