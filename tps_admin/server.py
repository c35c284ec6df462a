"""tps-admin MCP server — embedded in the daemon, served over streamable HTTP.

Exposes the same commands as the Unix socket surface. Tool handlers call the
daemon's CommandHandlers directly (no IPC).
"""

import json
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import Field

from .content.errors import ContentError

if TYPE_CHECKING:
    from .core.command_handlers import CommandHandlers

# --- Helpers ---


def _handlers(ctx: Context) -> "CommandHandlers":
    return ctx.fastmcp._lifespan_result["handlers"]


# --- Tool implementations ---


async def ping(ctx: Context = None) -> str:
    """Health check."""
    _handlers(ctx)
    return "pong"


async def greet_owner(
    name: Annotated[str, Field(description="Name of the signed-in owner")],
    ctx: Context = None,
) -> str:
    """Greeting shown on the admin dashboard."""
    return _handlers(ctx).greet_owner(name)


async def open_calendar(ctx: Context = None) -> str:
    """Open the events calendar in the default browser."""
    try:
        h = _handlers(ctx)
        h.open_calendar()
        return f"Opened {h.calendar_url}"
    except Exception as e:
        return f"Error opening calendar: {e}"


async def load_image_content(ctx: Context = None) -> str:
    """Get the image content document (hero, spotlights, gallery) as JSON."""
    try:
        return json.dumps(_handlers(ctx).load_image_content(), indent=2)
    except ContentError as e:
        return f"Error: {e}"


async def save_image_content(
    content: Annotated[Any, Field(description="Full image content document; replaces the stored one")],
    ctx: Context = None,
) -> str:
    """Replace the image content document. Objects get a fresh updatedAt stamp."""
    try:
        return json.dumps(_handlers(ctx).save_image_content(content), indent=2)
    except ContentError as e:
        return f"Error: {e}"


async def patch_image_content(
    patch: Annotated[dict, Field(description="Top-level keys to overwrite, e.g. {\"hero\": {...}}")],
    ctx: Context = None,
) -> str:
    """Overwrite selected top-level sections of the image content document."""
    try:
        return json.dumps(_handlers(ctx).patch_image_content(patch), indent=2)
    except (ContentError, ValueError) as e:
        return f"Error: {e}"


# --- Tool lists ---

_TOOLS = [
    ping,
    greet_owner,
    open_calendar,
    load_image_content,
    save_image_content,
    patch_image_content,
]


# --- App factory ---


def create_app(handlers):
    """Create the tps-admin MCP server.

    Args:
        handlers: CommandHandlers instance (or a mock exposing the same methods).
    """

    @asynccontextmanager
    async def handlers_lifespan(server):
        yield {"handlers": handlers}

    app = FastMCP("tps-admin", lifespan=handlers_lifespan)

    for fn in _TOOLS:
        app.tool()(fn)

    return app


# --- Embedded server ---


async def run_embedded(handlers, host="127.0.0.1", port=7787):
    """Serve the MCP app inside the daemon's event loop."""
    import uvicorn

    asgi = create_app(handlers).http_app(transport="streamable-http")
    cfg = uvicorn.Config(asgi, host=host, port=port, log_level="warning")
    await uvicorn.Server(cfg).serve()
