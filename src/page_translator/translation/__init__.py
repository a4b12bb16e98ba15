"""
Translation submodule for the page translation pipeline.

This submodule resolves page texts into a target language through a remote
translation gateway, with support for:
- Cache-aware batching (one request per orchestration pass)
- Fail-open error handling that keeps the original text visible
- Transient notifications for the reader

Author: Leonardo Pacciani-Mori
License: MIT
"""

from .notifications import Notifier, LogNotifier, QueueNotifier
from .gateway import (
    GatewayError,
    HttpGatewayTransport,
    TranslationGatewayClient,
    build_gateway_payload,
    parse_gateway_response,
)

__all__ = [
    # Notifications
    "Notifier",
    "LogNotifier",
    "QueueNotifier",
    # Gateway
    "GatewayError",
    "HttpGatewayTransport",
    "TranslationGatewayClient",
    "build_gateway_payload",
    "parse_gateway_response",
]
