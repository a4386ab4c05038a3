"""CLI entrypoint for eipbrowser."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from eipbrowser.corpus import load_corpus, resolve_base_path
from eipbrowser.documents import Document, category_color, status_color, type_color
from eipbrowser.errors import MissingConfigurationError
from eipbrowser.search import DEFAULT_FIELDS, SEARCH_FIELDS
from eipbrowser.session import BrowserOptions, Session
from eipbrowser.storage import Favorites, JsonFileStorage, Storage
from eipbrowser.sync import sync_if_stale
from eipbrowser.view import Row, Section, Tag

console = Console()

DEFAULT_STATE_FILE = Path(click.get_app_dir("eipbrowser")) / "state.json"


@dataclass
class AppContext:
    base_path: Path | None
    storage: Storage


def _require_base_path(app: AppContext) -> Path:
    if app.base_path is None:
        raise click.ClickException(
            "No repositories directory configured. "
            "Pass --base-path or set EIPBROWSER_BASE_PATH."
        )
    return app.base_path


def _sync(app: AppContext, force: bool = False) -> None:
    """Refresh the checkouts if due; failures are reported, never fatal."""
    base = _require_base_path(app)
    with console.status("Syncing repositories..."):
        results = sync_if_stale(app.storage, base, force=force)
    for result in results:
        if result.ok:
            console.print(f"[green]{result.repository}[/green] {result.action}: {escape(result.message) or 'ok'}")
        else:
            console.print(f"[yellow]{result.repository} {result.action} failed: {escape(result.message)}[/yellow]")


def _open_session(app: AppContext, options: BrowserOptions) -> Session:
    with console.status("Loading documents..."):
        corpus = load_corpus(app.base_path)
    if not corpus and app.base_path is not None:
        try:
            resolve_base_path(app.base_path)
        except MissingConfigurationError as exc:
            console.print(f"[yellow]{exc}[/yellow]")
        else:
            console.print(f"[yellow]No EIPs or ERCs found under {app.base_path}.[/yellow]")
    return Session(corpus, Favorites(app.storage), options)


def _get_document(session: Session, doc_id: str) -> Document:
    doc = session.find(doc_id)
    if doc is None:
        raise click.ClickException(f"No document {doc_id!r} found.")
    return doc


def _tag_text(tag: Tag) -> Text:
    return Text(tag.text, style=tag.color or "dim")


def _tags_cell(row: Row) -> Text:
    return Text(" ").join(_tag_text(t) for t in row.tags)


def _render_sections(sections: list[Section], limit: int | None = None) -> None:
    remaining = limit
    for section in sections:
        title = f"{section.title} ({len(section)})" if section.title else None
        if not section.rows:
            if title:
                console.print(f"[dim]{title}: nothing here[/dim]")
            continue

        rows = section.rows if remaining is None else section.rows[:remaining]
        table = Table(title=title, title_justify="left", show_edge=False)
        table.add_column("", width=1)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("Tags")
        table.add_column("Created", style="dim", no_wrap=True)

        for row in rows:
            table.add_row(
                row.icon,
                row.subtitle,
                Text(row.title),
                _tags_cell(row),
                row.created.isoformat() if row.created else "",
            )
        console.print(table)

        if len(rows) < len(section.rows):
            console.print(f"[dim]... {len(section.rows) - len(rows)} more[/dim]")
        if remaining is not None:
            remaining = max(remaining - len(rows), 0)

    if not any(section.rows for section in sections):
        console.print("[yellow]No matching documents.[/yellow]")


def _render_document(doc: Document, favorite: bool) -> None:
    meta = Table.grid(padding=(0, 2))
    meta.add_column(style="bold")
    meta.add_column()
    meta.add_row("eip", str(doc.number))
    meta.add_row("title", Text(doc.title))
    meta.add_row("author", Text(doc.author))
    meta.add_row("created", doc.created.isoformat() if doc.created else "")
    meta.add_row(
        "type / category / status",
        Text(" / ").join(
            [
                Text(doc.doc_type, style=type_color(doc.doc_type) or ""),
                Text(doc.category, style=category_color(doc.category) or ""),
                Text(doc.status, style=status_color(doc.status) or ""),
            ]
        ),
    )
    meta.add_row("github", Text(doc.source_url))
    if doc.discussion_url:
        meta.add_row("discussion", Text(doc.discussion_url))

    star = " ★" if favorite else ""
    console.print(Panel(meta, title=f"{doc.id}{star}", title_align="left"))
    console.print(Markdown(doc.body))


@click.group()
@click.option(
    "--base-path",
    envvar="EIPBROWSER_BASE_PATH",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the EIPs and ERCs checkouts.",
)
@click.option(
    "--state-file",
    envvar="EIPBROWSER_STATE",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Favorites and sync state. Default: {DEFAULT_STATE_FILE}",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def main(ctx: click.Context, base_path: str | None, state_file: str | None, verbose: bool):
    """eipbrowser — search and browse local EIP/ERC checkouts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = AppContext(
        base_path=Path(base_path).expanduser() if base_path else None,
        storage=JsonFileStorage(state_file or DEFAULT_STATE_FILE),
    )


@main.command(name="list")
@click.argument("query", nargs=-1)
@click.option(
    "--field",
    "fields",
    multiple=True,
    type=click.Choice(list(SEARCH_FIELDS)),
    help="Restrict search to these fields (repeatable).",
)
@click.option("--no-favorites", is_flag=True, help="Do not split out a Favorites section.")
@click.option("--no-sync", is_flag=True, help="Skip the daily repository refresh.")
@click.option("--limit", default=50, show_default=True, help="Maximum rows to show (0 for all).")
@click.pass_obj
def list_documents(app: AppContext, query: tuple[str, ...], fields, no_favorites: bool, no_sync: bool, limit: int):
    """List documents, favorites first, or search them with QUERY."""
    _require_base_path(app)
    options = BrowserOptions(
        show_favorites=not no_favorites,
        search_fields=tuple(fields) or DEFAULT_FIELDS,
        enable_sync=not no_sync,
    )
    if options.enable_sync:
        _sync(app)

    session = _open_session(app, options)
    _render_sections(session.set_query(" ".join(query)), limit or None)


@main.command()
@click.argument("doc_id")
@click.pass_obj
def show(app: AppContext, doc_id: str):
    """Show a document's metadata and rendered body (e.g. EIP-1559)."""
    session = _open_session(app, BrowserOptions(enable_sync=False))
    doc = _get_document(session, doc_id)
    _render_document(doc, session.favorites.is_favorite(doc))


@main.command(name="open")
@click.argument("doc_id")
@click.option("--discussion", is_flag=True, help="Open the discussion thread instead of GitHub.")
@click.pass_obj
def open_document(app: AppContext, doc_id: str, discussion: bool):
    """Open a document on GitHub (or its discussion) in the browser."""
    session = _open_session(app, BrowserOptions(enable_sync=False))
    doc = _get_document(session, doc_id)
    url = doc.discussion_url if discussion else doc.source_url
    if not url:
        raise click.ClickException(f"{doc.id} has no discussion link.")
    console.print(f"Opening {url}")
    click.launch(url)


@main.command()
@click.argument("doc_id")
@click.pass_obj
def fav(app: AppContext, doc_id: str):
    """Toggle DOC_ID as a favorite."""
    session = _open_session(app, BrowserOptions(enable_sync=False))
    try:
        key, now_favorite = session.toggle_favorite(doc_id)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    if now_favorite:
        console.print(f"[green]★ {key} added to favorites[/green]")
    else:
        console.print(f"{key} removed from favorites")


@main.command()
@click.option("--force", is_flag=True, help="Sync even if the last sync is recent.")
@click.pass_obj
def sync(app: AppContext, force: bool):
    """Clone or pull the EIPs and ERCs repositories."""
    _require_base_path(app)
    with console.status("Syncing repositories..."):
        results = sync_if_stale(app.storage, app.base_path, force=force)
    if not results:
        console.print("[green]Repositories synced within the last day; use --force to sync now.[/green]")
        return
    for result in results:
        status = "[green]ok[/green]" if result.ok else "[red]failed[/red]"
        console.print(f"{result.repository} {result.action}: {status} {escape(result.message)}")
    if not all(result.ok for result in results):
        raise SystemExit(1)


@main.command()
@click.option("--no-favorites", is_flag=True, help="Do not split out a Favorites section.")
@click.option("--no-sync", is_flag=True, help="Skip the daily repository refresh.")
@click.option("--limit", default=20, show_default=True, help="Maximum rows per screen.")
@click.pass_obj
def browse(app: AppContext, no_favorites: bool, no_sync: bool, limit: int):
    """Interactive search. Commands: :show ID, :open ID, :fav ID, :reload, :q."""
    _require_base_path(app)
    options = BrowserOptions(show_favorites=not no_favorites, enable_sync=not no_sync)
    if options.enable_sync:
        _sync(app)
    session = _open_session(app, options)

    _render_sections(session.view(), limit)
    while True:
        try:
            text = click.prompt("search", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            break

        command, _, arg = text.strip().partition(" ")
        if command in (":q", ":quit"):
            break
        if command == ":reload":
            session.reload(app.base_path)
        elif command == ":fav":
            try:
                key, now_favorite = session.toggle_favorite(arg)
            except ValueError as exc:
                console.print(f"[yellow]{escape(str(exc))}[/yellow]")
                continue
            console.print(f"{key} {'added to' if now_favorite else 'removed from'} favorites")
        elif command in (":show", ":open"):
            doc = session.find(arg)
            if doc is None:
                console.print(f"[yellow]No document {arg!r}.[/yellow]")
            elif command == ":show":
                _render_document(doc, session.favorites.is_favorite(doc))
            else:
                console.print(f"Opening {doc.source_url}")
                click.launch(doc.source_url)
            continue
        else:
            session.set_query(text)
        _render_sections(session.view(), limit)


if __name__ == "__main__":
    main()
