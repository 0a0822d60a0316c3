"""logo-png CLI — run the server, grab snapshots, browse history, watch live.

Usage:
    logo-png serve                              # Run the API + update loop
    logo-png snapshot -o logo.png --size 10     # Download the current logo
    logo-png history --limit 20                 # List stored timestamps
    logo-png watch --out-dir frames/            # Save every live frame
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
import httpx
import websockets

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3000"


def _api_url() -> str:
    return os.environ.get("LOGO_PNG_API_URL", DEFAULT_API_URL).rstrip("/")


def _live_url() -> str:
    base = _api_url()
    if base.startswith("https://"):
        return "wss://" + base[len("https://"):] + "/live"
    return "ws://" + base.removeprefix("http://") + "/live"


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the logo-png server."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _frame_name(index: int) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"logo-{stamp}-{index:04d}.png"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="logo-png")
def main():
    """logo-png — live logo renderer with history."""


@main.command()
@click.option("--host", default=None, help="Bind address (default from LOGO_PNG_HOST)")
@click.option("--port", default=None, type=int, help="Port (default from LOGO_PNG_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP/websocket server and the update loop."""
    import uvicorn

    from logo_png.config import settings

    uvicorn.run(
        "logo_png.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
@click.option("--size", "-s", default=1, show_default=True, type=int, help="Pixel scale")
@click.option("--character", "-c", default=None, type=int, help="Only this character (0-6)")
@click.option("--output", "-o", default="logo.png", show_default=True,
              type=click.Path(dir_okay=False, path_type=Path))
def snapshot(size: int, character: Optional[int], output: Path):
    """Download the current logo as a PNG file."""
    _run(_snapshot_impl(size, character, output))


async def _snapshot_impl(size: int, character: Optional[int], output: Path):
    params: dict = {"size": size}
    if character is not None:
        params["character"] = character

    async with _client() as c:
        try:
            r = await c.get("/logo.png", params=params)
        except httpx.HTTPError as e:
            _fail(f"could not reach {_api_url()}: {e}")
        if r.status_code != 200:
            _fail(f"server returned {r.status_code}: {r.text[:200]}")

    output.write_bytes(r.content)
    click.secho(f"Saved {len(r.content)} bytes to {output}", fg="green")


@main.command()
@click.option("--limit", "-n", default=None, type=int, help="Show only the N most recent")
def history(limit: Optional[int]):
    """List the timestamps of stored logo states."""
    _run(_history_impl(limit))


async def _history_impl(limit: Optional[int]):
    async with _client() as c:
        try:
            r = await c.get("/api/v1/history/index")
        except httpx.HTTPError as e:
            _fail(f"could not reach {_api_url()}: {e}")
        if r.status_code != 200:
            _fail(f"server returned {r.status_code}: {r.text[:200]}")

    entries = r.json()
    if limit is not None:
        entries = entries[-limit:]

    if not entries:
        click.echo("No history yet.")
        return

    for entry in entries:
        click.echo(entry["time"])
    click.secho(f"{len(entries)} entr{'y' if len(entries) == 1 else 'ies'}", bold=True)


@main.command()
@click.option("--out-dir", "-d", default=".", show_default=True,
              type=click.Path(file_okay=False, path_type=Path))
@click.option("--count", "-n", default=None, type=int, help="Stop after N frames")
def watch(out_dir: Path, count: Optional[int]):
    """Connect to /live and save every pushed frame."""
    out_dir.mkdir(parents=True, exist_ok=True)
    try:
        _run(_watch_impl(out_dir, count))
    except KeyboardInterrupt:
        click.echo("\nStopped.")


async def _watch_impl(out_dir: Path, count: Optional[int]):
    url = _live_url()
    click.echo(f"Watching {url} ...")
    received = 0
    try:
        async with websockets.connect(url) as ws:
            async for message in ws:
                if isinstance(message, str):
                    continue
                received += 1
                path = out_dir / _frame_name(received)
                path.write_bytes(message)
                click.echo(f"[{received}] {path} ({len(message)} bytes)")
                if count is not None and received >= count:
                    return
    except (OSError, websockets.exceptions.WebSocketException) as e:
        _fail(f"live connection failed: {e}")


if __name__ == "__main__":
    main()
