"""
SubscriptProxy Prototype Layer

Inserts a synthetic class into an instance's inheritance chain and
resolves attribute reads through a user-supplied source, a wildcard
handler, and ordinary inherited lookup, in that order.
"""

from subscriptproxy.proto_proxy.interceptor import (
    InterceptInstallError,
    SubscriptProxy,
    install,
)
from subscriptproxy.proto_proxy.models import ALL, GENFN, LayerOptions, SourceKind

__all__ = [
    "ALL",
    "GENFN",
    "InterceptInstallError",
    "LayerOptions",
    "SourceKind",
    "SubscriptProxy",
    "install",
]
