"""Hand URLs off to the user's default browser."""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable

logger = logging.getLogger(__name__)

UrlOpener = Callable[[str], None]


def open_url(url: str) -> None:
    """Open ``url`` in the default browser.

    Raises:
        RuntimeError: No browser could be launched.
    """
    logger.info(f"Opening {url}")
    if not webbrowser.open(url):
        raise RuntimeError(f"No browser available to open {url}")
