from __future__ import annotations

from typing import Optional


def client_address(request, *, trust_proxy_headers: bool = False) -> Optional[str]:
    """Network origin of an HTTP request, used to stamp check-in/check-out."""

    if trust_proxy_headers:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.remote_addr or None
