"""
Xync Backend — Bookmark Preview Service
=======================================

What:  Fetches a web page and extracts title, description, preview image and
       favicon for a bookmark.
How:   httpx async GET (redirects followed, bounded timeout, fixed
       User-Agent) → BeautifulSoup over the HTML → BookmarkPreview.
Who:   POST /bookmarks/preview, and POST /bookmarks when `fetch_preview`
       is true.

Failure Policy:
    A preview is decoration. Every failure (DNS, refused target, timeout,
    a URL httpx cannot build a request from, non-2xx status, non-HTML body,
    unparseable markup) returns an empty BookmarkPreview and logs a warning.
    fetch_preview() never raises for these.

SSRF Guard:
    The server fetches URLs chosen by clients. Before the request, and again
    for the final URL after redirects, the hostname is resolved and refused
    if any address is private, loopback, link-local, multicast, reserved or
    unspecified.

Extraction Priority:
    title:        og:title → <title>
    description:  og:description → meta[name=description]
    image:        og:image (resolved against the page URL)
    favicon:      link[rel~=icon] (resolved) → scheme://host/favicon.ico
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from xync.config import settings
from xync.schemas.bookmark import BookmarkPreview

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 2 * 1024 * 1024


class PreviewBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""


def is_private_ip(ip_str: str) -> bool:
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


async def validate_url_not_private(url: str) -> None:
    """
    Resolve the URL's host and refuse internal targets.

    Raises:
        PreviewBlockedError: host is localhost or resolves to an internal address
        ValueError: no hostname, or DNS resolution failed
    """
    hostname = urlparse(url).hostname
    if not hostname:
        raise ValueError("URL has no hostname")
    if hostname.lower() in ("localhost", "localhost.localdomain"):
        raise PreviewBlockedError(f"Blocked request to {hostname}")

    loop = asyncio.get_running_loop()
    try:
        addrinfo = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    except socket.gaierror as exc:
        raise ValueError(f"Could not resolve hostname: {hostname}") from exc

    for _family, _type, _proto, _canon, sockaddr in addrinfo:
        if is_private_ip(sockaddr[0]):
            raise PreviewBlockedError(f"Blocked request to internal address for {hostname}")


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def extract_preview(html: str, page_url: str) -> BookmarkPreview:
    """Pure function: HTML + the URL it came from → preview fields."""
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, property="og:title")
    if title is None and soup.title is not None and soup.title.string:
        title = soup.title.string.strip() or None

    description = _meta_content(soup, property="og:description") or _meta_content(
        soup, name="description"
    )

    image = _meta_content(soup, property="og:image")
    if image is not None:
        image = urljoin(page_url, image)

    favicon = None
    icon_link = soup.find("link", rel=lambda value: value is not None and value.lower() == "icon")
    if icon_link is not None and icon_link.get("href"):
        favicon = urljoin(page_url, icon_link["href"].strip())
    if favicon is None:
        parsed = urlparse(page_url)
        if parsed.scheme and parsed.netloc:
            favicon = f"{parsed.scheme}://{parsed.netloc}/favicon.ico"

    return BookmarkPreview(title=title, description=description, image=image, favicon=favicon)


class PreviewService:
    """
    Stateless apart from configuration. `transport` exists so tests can
    substitute an httpx.MockTransport for the network.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.preview_timeout
        self.user_agent = user_agent or settings.preview_user_agent
        self.transport = transport

    async def fetch_preview(self, url: str) -> BookmarkPreview:
        try:
            return await self._fetch(url)
        except (PreviewBlockedError, ValueError) as exc:
            logger.warning("Preview refused for %s: %s", url, exc)
        except httpx.TimeoutException:
            logger.warning("Preview timed out for %s", url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Preview fetch failed for %s: %s", url, type(exc).__name__)
        return BookmarkPreview()

    async def _fetch(self, url: str) -> BookmarkPreview:
        await validate_url_not_private(url)

        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        ) as client:
            response = await client.get(url)

        final_url = str(response.url)
        if final_url != url:
            await validate_url_not_private(final_url)

        if not response.is_success:
            logger.warning("Preview for %s returned HTTP %d", url, response.status_code)
            return BookmarkPreview()

        content_type = response.headers.get("content-type", "").lower()
        if "html" not in content_type:
            logger.info("Preview skipped for %s: content type %s", url, content_type or "unknown")
            return BookmarkPreview()

        html = response.content[:MAX_BODY_BYTES].decode(
            response.encoding or "utf-8", errors="replace"
        )
        return extract_preview(html, final_url)


preview_service = PreviewService()
