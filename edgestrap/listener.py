"""Web listener setup for services that run without a zero trust overlay network."""

from __future__ import annotations

import logging
import socket
from typing import Mapping, Optional

OPENZITI_CONTROLLER_KEY = "OpenZitiController"
ZERO_TRUST_MODE = "zerotrust"
OPENZITI_SERVICE_PREFIX = "edgex."
SECURITY_MODE_KEY = "Mode"

_LOG = logging.getLogger(__name__)


def is_zero_trust_mode(security_options: Optional[Mapping[str, str]]) -> bool:
    """Whether the security options ask for the zero trust mode, ignoring case."""
    mode = (security_options or {}).get(SECURITY_MODE_KEY)
    return mode is not None and mode.casefold() == ZERO_TRUST_MODE


def _split_address(addr: str) -> tuple[str, int]:
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        raise ValueError("missing port in address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port {port_text!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"invalid port {port}")
    return host, port


def setup_web_listener(
    security_options: Optional[Mapping[str, str]],
    service_name: str,
    addr: str,
    logger: Optional[logging.Logger] = None,
) -> socket.socket:
    """Open a listening TCP socket on ``addr`` (``host:port``).

    Zero trust mode is not available here; asking for it only logs a warning.
    """
    log = logger if logger is not None else _LOG
    options = security_options or {}
    listen_mode = options.get(SECURITY_MODE_KEY, "")
    if SECURITY_MODE_KEY in options:
        log.debug("service security option %s = %s", SECURITY_MODE_KEY, listen_mode)
        if is_zero_trust_mode(options):
            log.warning(
                "service %s is configured with zero trust security mode, but zero trust "
                "is not available. all zero trust operations will be ignored.",
                service_name,
            )
    log.debug("listening on underlay network. ListenMode '%s' at %s", listen_mode, addr)

    try:
        host, port = _split_address(addr)
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        return socket.create_server((host, port), family=family)
    except (OSError, ValueError) as err:
        raise OSError(f"could not listen on {addr}: {err}") from err