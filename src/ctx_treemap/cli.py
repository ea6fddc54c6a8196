"""CLI entry point for ctx-treemap."""

import asyncio
import tempfile
import webbrowser
from pathlib import Path

import typer

from .client import OpenCodeClient, OpenCodeError
from .config import REQUEST_TIMEOUT, GroupingPolicy, SizePolicy
from .models import SessionSnapshot
from .parser import parse_export
from .server import server_url

APP_HELP = """
Show which parts of an OpenCode session use up the context window.

\b
Sessions are fetched from a running OpenCode server (--url, or OPENCODE_URL).
Without a URL, `opencode serve` is started for the duration of the command.
Offline exports work too:
  opencode export <session-id> > session.json
  ctx-treemap view --file session.json
"""

VIEW_HELP = """
Browse a session's treemap in the terminal.

Without SESSION_ID a picker lists the sessions, newest first; type text to
filter by id or title, a number to open one. In the treemap, enter a leaf
number to read the full part, q to quit.
"""

HTML_HELP = """
Render a session treemap as interactive HTML and open it in the browser.

Click a box to read the full part, Esc to go back.

\b
Examples:
  ctx-treemap html ses_abc123
  ctx-treemap html --file session.json -o report.html --no-open
"""

JSON_HELP = """
Output the treemap forest as JSON for programmatic querying.

\b
Examples:
  # Total context use
  ctx-treemap json ses_abc123 | jq '.metadata.total'

  # Ten biggest parts
  ctx-treemap json ses_abc123 | jq '[.. | objects | select(.leafKey)] | sort_by(-.value) | .[:10]'
"""

app = typer.Typer(add_completion=False, help=APP_HELP)

URL_OPTION = typer.Option(None, "--url", envvar="OPENCODE_URL", help="OpenCode server URL")
FILE_OPTION = typer.Option(None, "--file", "-f", help="Read an exported session instead")
GROUPING_OPTION = typer.Option(
    GroupingPolicy.TYPE, "--grouping", help="Group same-type parts per message, or keep flat"
)
SIZE_POLICY_OPTION = typer.Option(
    SizePolicy.ZERO, "--size-policy", help="Size of bookkeeping parts: zero or full JSON"
)
TIMEOUT_OPTION = typer.Option(
    REQUEST_TIMEOUT, "--timeout", envvar="CTX_TREEMAP_TIMEOUT", help="Request timeout in seconds"
)


def fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


async def fetch_snapshot(session_id: str, url: str | None, timeout: float) -> SessionSnapshot:
    async with server_url(url) as base_url, OpenCodeClient(base_url, timeout) as client:
        return await client.fetch_snapshot(session_id)


def load_snapshot(
    session_id: str | None, url: str | None, file: Path | None, timeout: float
) -> SessionSnapshot:
    """Snapshot from --file, or from the server for SESSION_ID."""
    if file is not None:
        if not file.exists():
            raise fail(f"File not found: {file}")
        return parse_export(file)
    if not session_id:
        raise fail("SESSION_ID or --file is required")
    try:
        return asyncio.run(fetch_snapshot(session_id, url, timeout))
    except OpenCodeError as e:
        raise fail(str(e)) from e


async def browse(
    session_id: str | None,
    url: str | None,
    timeout: float,
    grouping: GroupingPolicy,
    size_policy: SizePolicy,
) -> None:
    """Picker and treemap views against one server connection."""
    from .picker import pick_session
    from .view import SessionView, run

    async with server_url(url) as base_url, OpenCodeClient(base_url, timeout) as client:
        if session_id:
            snapshot = await client.fetch_snapshot(session_id)
            view = SessionView.from_snapshot(snapshot, grouping, size_policy)
            await asyncio.to_thread(run, view)
            return

        sessions = await client.list_sessions()
        if not sessions:
            raise OpenCodeError("No sessions found")
        while True:
            chosen = await asyncio.to_thread(pick_session, sessions)
            if chosen is None:
                return
            snapshot = await client.fetch_snapshot(chosen.id)
            view = SessionView.from_snapshot(snapshot, grouping, size_policy)
            if not await asyncio.to_thread(run, view, None, True):
                return


@app.command(help=VIEW_HELP)
def view(
    session_id: str | None = typer.Argument(None, help="Session to open"),
    url: str | None = URL_OPTION,
    file: Path | None = FILE_OPTION,
    grouping: GroupingPolicy = GROUPING_OPTION,
    size_policy: SizePolicy = SIZE_POLICY_OPTION,
    timeout: float = TIMEOUT_OPTION,
) -> None:
    from .view import SessionView, run

    if file is not None:
        snapshot = load_snapshot(None, None, file, timeout)
        run(SessionView.from_snapshot(snapshot, grouping, size_policy))
        return

    try:
        asyncio.run(browse(session_id, url, timeout, grouping, size_policy))
    except OpenCodeError as e:
        raise fail(str(e)) from e


@app.command(help=HTML_HELP)
def html(
    session_id: str | None = typer.Argument(None, help="Session to render"),
    url: str | None = URL_OPTION,
    file: Path | None = FILE_OPTION,
    output: Path | None = typer.Option(None, "-o", "--output", help="Output HTML file path"),
    no_open: bool = typer.Option(False, "--no-open", help="Don't auto-open in browser"),
    grouping: GroupingPolicy = GROUPING_OPTION,
    size_policy: SizePolicy = SIZE_POLICY_OPTION,
    timeout: float = TIMEOUT_OPTION,
) -> None:
    from .renderer import render
    from .tree import build_tree

    snapshot = load_snapshot(session_id, url, file, timeout)
    root, index = build_tree(snapshot, grouping=grouping, size_policy=size_policy)
    title = session_id or "session"
    if snapshot.info is not None:
        title = snapshot.info.title or snapshot.info.id
    html_content = render(root, index, title=title)

    if output is None:
        output = Path(tempfile.mktemp(suffix=".html", prefix="ctx-treemap-"))

    output.write_text(html_content, encoding="utf-8")
    typer.echo(f"Written to {output}")

    if not no_open:
        webbrowser.open(f"file://{output}")


@app.command(name="json", help=JSON_HELP)
def json_(
    session_id: str | None = typer.Argument(None, help="Session to dump"),
    url: str | None = URL_OPTION,
    file: Path | None = FILE_OPTION,
    output: Path | None = typer.Option(None, "-o", "--output", help="Output JSON file path"),
    compact: bool = typer.Option(False, "--compact", help="No indentation (for piping)"),
    grouping: GroupingPolicy = GROUPING_OPTION,
    size_policy: SizePolicy = SIZE_POLICY_OPTION,
    timeout: float = TIMEOUT_OPTION,
) -> None:
    from .renderer import render_json
    from .tree import build_tree

    snapshot = load_snapshot(session_id, url, file, timeout)
    root, _ = build_tree(snapshot, grouping=grouping, size_policy=size_policy)
    sid = snapshot.info.id if snapshot.info else session_id
    json_str = render_json(root, sid, compact=compact)

    if output is None:
        typer.echo(json_str)
    else:
        output.write_text(json_str, encoding="utf-8")
        typer.echo(f"Written to {output}", err=True)


@app.command(help="List sessions, newest first.")
def sessions(
    query: str = typer.Argument("", help="Fuzzy filter on id or title"),
    url: str | None = URL_OPTION,
    timeout: float = TIMEOUT_OPTION,
) -> None:
    from .picker import filter_sessions, format_choice

    async def _list() -> list:
        async with server_url(url) as base_url, OpenCodeClient(base_url, timeout) as client:
            return await client.list_sessions()

    try:
        found = asyncio.run(_list())
    except OpenCodeError as e:
        raise fail(str(e)) from e
    if not found:
        raise fail("No sessions found")
    for i, session in enumerate(filter_sessions(found, query), 1):
        typer.echo(format_choice(i, session))


if __name__ == "__main__":
    app()
