"""Fetch configuration.

Example::

    from urlfmt.config import FetchConfig
    from urlfmt.common.request_manager import RequestManager

    config = FetchConfig(timeout=30.0, headers={"User-Agent": "my-bot"})
    with RequestManager(config) as manager:
        page, response = SteamAppPage.soup(477160, manager=manager)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USER_AGENT = "urlfmt (+https://pypi.org/project/urlfmt/)"


class FetchConfig(BaseModel):
    """HTTP client settings shared by the HTML and JSON fetch paths.

    Attributes:
        timeout: Request timeout in seconds. None means no timeout.
        headers: Headers sent with every request built from this config.
        verify: Whether to verify TLS certificates.
        follow_redirects: Whether redirects are followed automatically.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float | None = 10.0
    headers: dict[str, str] = Field(
        default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT}
    )
    verify: bool = True
    follow_redirects: bool = True


DEFAULT_CONFIG = FetchConfig()
