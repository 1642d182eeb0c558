"""Token providers - where a session cookie comes from."""

from __future__ import annotations

import logging
import webbrowser
from typing import Protocol

import click

logger = logging.getLogger(__name__)

ASANA_APP_URL = "https://app.asana.com"

COOKIE_INSTRUCTIONS = """\
Please follow these steps:

  1. Log in to Asana in your browser
  2. Open Developer Tools (F12 or Cmd+Option+I)
  3. Go to the Network tab and refresh the page
  4. Click on any request to app.asana.com
  5. In the Headers tab, find 'Cookie' under Request Headers
  6. Copy the cookie value and paste it below
"""


class TokenProvider(Protocol):
    """Produces a session token, or None if the user gave up."""

    def acquire_token(self) -> str | None:
        """Return a session token or None."""
        ...


class StaticTokenProvider:
    """Hands back a token supplied by the caller (e.g. pasted into a UI)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def acquire_token(self) -> str | None:
        return self._token


class BrowserPromptTokenProvider:
    """Opens Asana in the browser and asks the user to paste the cookie."""

    def __init__(self, url: str = ASANA_APP_URL, open_browser: bool = True) -> None:
        self.url = url
        self.open_browser = open_browser

    def acquire_token(self) -> str | None:
        if self.open_browser:
            try:
                webbrowser.open(self.url)
            except webbrowser.Error as e:
                logger.warning("Could not open browser: %s", e)
        click.echo(COOKIE_INSTRUCTIONS)
        try:
            value = click.prompt(
                "Cookie", default="", show_default=False, hide_input=True
            )
        except click.Abort:
            return None
        return value.strip() or None
