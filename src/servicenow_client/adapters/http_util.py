"""Shared HTTP client utilities (e.g. timeouts)."""

from __future__ import annotations

import httpx


def timeouts_for(seconds: float | None) -> httpx.Timeout:
    """Build httpx.Timeout with bounded connect/pool; None disables every timeout."""
    if seconds is None:
        return httpx.Timeout(None)
    total = float(seconds)
    connect = min(5.0, total)
    return httpx.Timeout(connect=connect, read=total, write=total, pool=connect)


def build_http_client(
    *,
    timeout_seconds: float | None = None,
    verify_tls: bool = True,
    trust_env: bool = False,
) -> httpx.Client:
    return httpx.Client(
        timeout=timeouts_for(timeout_seconds),
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
            keepalive_expiry=30.0,
        ),
        verify=verify_tls,
        trust_env=trust_env,
        follow_redirects=False,
    )
