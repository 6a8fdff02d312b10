"""
SubscriptProxy

Intercepts attribute reads, existence checks and enumeration on an
object's inheritance chain without touching the object's own
attributes or its original class.
"""

from subscriptproxy.proto_proxy import (
    ALL,
    GENFN,
    InterceptInstallError,
    LayerOptions,
    SourceKind,
    SubscriptProxy,
    install,
)

__version__ = "1.0.0"

__all__ = [
    "ALL",
    "GENFN",
    "InterceptInstallError",
    "LayerOptions",
    "SourceKind",
    "SubscriptProxy",
    "install",
    "__version__",
]
