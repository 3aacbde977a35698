"""Helpers for git remote URLs."""

from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from ..exceptions import ConfigError, ParseError


def trim_url(fetch_url: str) -> str:
    """Reduce a remote URL to its ``owner/name`` form.

    Handles scp-like (``git@host:owner/name.git``), ``ssh://``, ``http(s)://``
    URLs, user info and ports. Extra leading path segments such as ``scm/``
    are dropped.
    """
    url = fetch_url.strip()
    if not url:
        raise ParseError("Empty remote URL")

    if "://" in url:
        path = urlsplit(url).path
    elif ":" in url:
        # scp-like syntax: [user@]host:path
        path = url.split(":", 1)[1]
    else:
        path = url

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        raise ParseError(f"Unable to deduce repository name from {fetch_url}", details={"url": fetch_url})
    return "/".join(segments[-2:])


def with_credentials(url: str, username: Optional[str], password: Optional[str] = None) -> str:
    """Embed username and password into an HTTP(S) URL.

    Other URL schemes are returned unchanged.
    """
    if not username:
        return url

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return url
    if not parts.hostname:
        raise ConfigError(f"Invalid remote URL: {url}")

    userinfo = quote(username, safe="")
    if password:
        userinfo += ":" + quote(password, safe="")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{userinfo}@{host}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
