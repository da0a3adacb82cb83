from __future__ import annotations

from typing import Dict, Iterable, Tuple

import click
import requests

from kotoba.config import get_settings

REQUEST_TIMEOUT_SEC = 120


def server_url(base_url: str, path: str) -> str:
    base = base_url.strip().rstrip("/")
    if "://" not in base:
        base = f"https://{base}"
    return f"{base}{path}"


def resolve_auth() -> Tuple[str, str]:
    credentials = get_settings().credentials
    return credentials.username or "USERNAME", credentials.password or "PASSWORD"


def join_prompt(words: Iterable[str]) -> str:
    return " ".join(words).strip()


def require_prompt(ctx: click.Context, prompt: str, usage: str) -> None:
    if not prompt:
        click.echo(usage, err=True)
        ctx.exit(1)


def send(path: str, params: Dict[str, str], *, stream: bool = False) -> requests.Response:
    """Issue the single authenticated GET a CLI run is allowed to make."""
    settings = get_settings()
    return requests.get(
        server_url(settings.base_url, path),
        params=params,
        auth=resolve_auth(),
        stream=stream,
        timeout=REQUEST_TIMEOUT_SEC,
    )


def fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)
