"""Session picker: fuzzy search over session ids and titles."""

from datetime import datetime, timezone

import typer

from .models import SessionInfo


def relative_time(created_ms: float, now: datetime | None = None) -> str:
    """Compact recency label for a millisecond timestamp (e.g. '3h ago')."""
    now = now or datetime.now(timezone.utc)
    created = datetime.fromtimestamp(created_ms / 1000, tz=timezone.utc)
    seconds = int((now - created).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days <= 30:
        return f"{days}d ago"
    return created.strftime("%Y-%m-%d")


def fuzzy_score(query: str, text: str) -> int | None:
    """Score a subsequence match of query in text, or None if it doesn't match.

    Consecutive matches and matches at the start score higher.
    """
    query, text = query.lower(), text.lower()
    score = 0
    pos = 0
    prev = -2
    for ch in query:
        found = text.find(ch, pos)
        if found < 0:
            return None
        score += 1
        if found == prev + 1:
            score += 2
        if found == 0:
            score += 3
        prev = found
        pos = found + 1
    return score


def _recency(session: SessionInfo) -> float:
    return session.time.updated or session.time.created


def filter_sessions(sessions: list[SessionInfo], query: str = "") -> list[SessionInfo]:
    """Sessions matching query on id or title, best match first, then newest."""
    if not query.strip():
        return sorted(sessions, key=_recency, reverse=True)

    scored = []
    for session in sessions:
        scores = [
            s
            for s in (fuzzy_score(query, session.id), fuzzy_score(query, session.title or ""))
            if s is not None
        ]
        if scores:
            scored.append((max(scores), session))
    scored.sort(key=lambda item: (item[0], _recency(item[1])), reverse=True)
    return [session for _, session in scored]


def format_choice(number: int, session: SessionInfo, now: datetime | None = None) -> str:
    age = relative_time(session.time.created, now)
    return f"{number:>3}. {session.title or '(untitled)'}  [{session.id}]  {age}"


def pick_session(sessions: list[SessionInfo], limit: int = 20) -> SessionInfo | None:
    """Interactive picker. Returns None when the user quits."""
    query = ""
    while True:
        matches = filter_sessions(sessions, query)[:limit]
        typer.echo()
        if not matches:
            typer.echo(f"No sessions match {query!r}")
        for i, session in enumerate(matches, 1):
            typer.echo(format_choice(i, session))

        answer = typer.prompt(
            "Number to open, text to search, q to quit", default="", show_default=False
        ).strip()
        if answer.lower() == "q":
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(matches):
            return matches[int(answer) - 1]
        query = answer
