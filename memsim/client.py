"""Messages sent from one module to another over HTTP."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from collections.abc import Sequence
from typing import Any

from memsim.models import Handshake, IoDisconnected, IoRequest, IoResponse, Message

_logger = logging.getLogger(__name__)
_TIMEOUT = 10.0


class ArgumentError(ValueError):
    """Raised when a command gets fewer arguments than it needs."""


def check_arguments(argv: Sequence[str], count: int) -> list[str]:
    """Check that ``argv`` (program name included) holds at least ``count`` items."""
    if len(argv) < count:
        raise ArgumentError("ERROR: No se ingresaron la cantidad de parametros necesarios")
    return list(argv)


def _post(ip: str, port: int, route: str, payload: Any) -> int:
    """POST ``payload`` as JSON and return the HTTP status of the answer."""
    body = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    request = urllib.request.Request(
        f"http://{ip}:{port}/{route}",
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT) as response:
            response.read()
            return response.status
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.code


def send_message(ip: str, port: int, text: str) -> int:
    """Send a text message; returns the status of the answer.

    Raises ``OSError`` when the peer cannot be reached.
    """
    try:
        status = _post(ip, port, "mensaje", Message(text).to_dict())
    except OSError:
        _logger.error("error enviando mensaje a ip:%s puerto:%d", ip, port)
        raise
    _logger.info("respuesta del servidor: %d", status)
    return status


def send_io_request(ip: str, port: int, request: IoRequest) -> int | None:
    """Ask an I/O device to serve a process; None if it cannot be reached."""
    try:
        return _post(ip, port, "solicitud-io", request.to_dict())
    except OSError:
        _logger.error("error enviando solicitudIO:%s puerto:%d", ip, port)
        return None


def send_io_finished(ip: str, port: int, response: IoResponse) -> int | None:
    """Tell the kernel a device finished; None if it cannot be reached."""
    try:
        return _post(ip, port, "finalizar-io", response.to_dict())
    except OSError:
        _logger.error("error enviando respuestaIO:%s puerto:%d", ip, port)
        return None


def send_handshake(ip: str, port: int, handshake: Handshake) -> int | None:
    """Announce an address to a peer; None if it cannot be reached."""
    try:
        return _post(ip, port, "recibir-handshake", handshake.to_dict())
    except OSError:
        return None


def send_disconnection(ip: str, port: int, device: IoDisconnected) -> int | None:
    """Tell the kernel a device went away; None if it cannot be reached."""
    try:
        return _post(ip, port, "desconexion-io", device.to_dict())
    except OSError:
        return None