"""
Network utilities for pathfetch.

URL parsing and TLS context helpers used by the HTTP/1.1 transport.
"""

import ssl
from typing import List, Optional, Tuple
from urllib.parse import urlsplit


DEFAULT_PORTS = {"http": 80, "https": 443}


def create_ssl_context(
    alpn_protocols: Optional[List[str]] = None,
    verify_mode: ssl.VerifyMode = ssl.CERT_REQUIRED,
    check_hostname: bool = True,
) -> ssl.SSLContext:
    """
    Create a client SSL context.

    Args:
        alpn_protocols: Optional list of ALPN protocols to negotiate
        verify_mode: SSL verification mode
        check_hostname: Whether to verify hostname

    Returns:
        Configured SSL context
    """
    context = ssl.create_default_context()
    context.check_hostname = check_hostname
    context.verify_mode = verify_mode

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Parse URL into components.

    Args:
        url: Absolute http or https URL

    Returns:
        Tuple of (scheme, host, port, target) where target is the path
        plus query string

    Raises:
        ValueError: If the URL has no host or an unsupported scheme
    """
    parsed = urlsplit(url)

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme!r}")

    host = parsed.hostname or ""
    if not host:
        raise ValueError("No hostname found in URL")

    port = parsed.port or DEFAULT_PORTS[scheme]

    target = parsed.path or "/"
    if parsed.query:
        target += "?" + parsed.query

    return scheme, host, port, target


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format the Host header value, omitting the default port.
    """
    if ":" in host:
        host = f"[{host}]"
    if DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"
