"""HTTP front end of the memory module and the command that starts it."""

from __future__ import annotations

import base64
import json
import logging
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlsplit

from memsim.client import ArgumentError, check_arguments
from memsim.config import ConfigError, load_memory_config
from memsim.dump import DumpError, dump_memory
from memsim.logger import LogLevelError, close_logger, new_logger, parse_level
from memsim.manager import MemoryManager, ProcessError, load_instructions
from memsim.metrics import table_accesses
from memsim.models import (
    DumpResult,
    FreeSpace,
    Handshake,
    MemoryInfo,
    ProcessRequest,
    ReadRequest,
    WriteRequest,
)
from memsim.swap import SwapError
from memsim.usermemory import MemoryAccessError

_JSON = "application/json"
_TEXT = "text/plain; charset=utf-8"

Reply = tuple[int, str, bytes]


def _json_reply(value: Any, status: int = 200) -> Reply:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":")) + "\n"
    return status, _JSON, text.encode("utf-8")


def _error(message: str, status: int) -> Reply:
    return status, _TEXT, (message + "\n").encode("utf-8")


def _empty() -> Reply:
    return 200, _TEXT, b""


def _load(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValueError(f"invalid JSON body: {exc}") from exc


def _lookup(data: Mapping, key: str) -> Any:
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _int_field(data: Mapping, key: str) -> int:
    value = _lookup(data, key)
    if value is None:
        return 0
    if not _is_int(value):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _object(body: bytes) -> Mapping:
    value = _load(body)
    if not isinstance(value, Mapping):
        raise ValueError("expected a JSON object")
    return value


def decode_pid(data: bytes) -> int:
    """Read a PID sent either as ``{"pid": N}`` or as a bare number."""
    value = _load(data)
    if value is None:
        return 0
    if isinstance(value, Mapping):
        return _int_field(value, "pid")
    if _is_int(value):
        return value
    raise ValueError(f"expected a PID object or number, got {value!r}")


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class MemoryService:
    """Answers the requests of the kernel and the CPUs."""

    def __init__(
        self,
        manager: MemoryManager,
        scripts_dir: str = "../pruebas/",
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.manager = manager
        self.config = manager.config
        self.logger = manager.logger
        self.scripts_dir = scripts_dir
        self.kernel_ip = ""
        self.kernel_port = 0
        self._sleep = sleep
        self._routes: dict[str, Callable[[bytes], Reply]] = {
            "/recibir-handshake": self._kernel_handshake,
            "/obtener-instruccion": self._fetch_instruction,
            "/espacio-libre": self._free_space,
            "/cargar-proceso": self._load_process,
            "/conectarcpumemoria": self._cpu_handshake,
            "/escribir": self._write,
            "/leer": self._read,
            "/desuspension-proceso": self._resume,
            "/suspension-proceso": self._suspend,
            "/finalizar-proceso": self._finalize,
            "/memory-dump": self._dump,
            "/solicitud-marco": self._frame,
            "/pagina": self._page,
        }

    def handle(self, path: str, body: bytes) -> Reply:
        """Serve one request; returns status, content type and body."""
        route = self._routes.get(path)
        if route is None:
            return _error("404 page not found", 404)
        return route(body)

    def _delay(self, milliseconds: int) -> None:
        self._sleep(milliseconds / 1000)

    def _kernel_handshake(self, body: bytes) -> Reply:
        try:
            handshake = Handshake.from_dict(_load(body))
        except ValueError as exc:
            self.logger.error("Error decodificando handshake: %s", exc)
            return _error("Error al decodificar mensaje", 400)
        self.kernel_ip = handshake.ip
        self.kernel_port = handshake.port
        self.logger.debug("Handshake recibido: IP=%s, Puerto=%d", handshake.ip, handshake.port)
        return _empty()

    def _cpu_handshake(self, body: bytes) -> Reply:
        try:
            _object(body)
        except ValueError as exc:
            self.logger.error("Error decodificando handshake CPU: %s", exc)
            return _error("Error al decodificar mensaje", 400)
        info = MemoryInfo(
            page_size=self.config.page_size,
            entries_per_page=self.config.entries_per_page,
            levels=self.config.number_of_levels,
        )
        return _json_reply(info.to_dict())

    def _fetch_instruction(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            data = _object(body)
            pid, pc = _int_field(data, "pid"), _int_field(data, "pc")
        except ValueError as exc:
            self.logger.error("Error decodificando solicitud de instrucción: %s", exc)
            return _error("Error al decodificar la solicitud de instrucción", 400)
        try:
            instruction = self.manager.fetch_instruction(pid, pc)
        except ProcessError as exc:
            self.logger.error("Error buscando instrucción PID=%d, PC=%d: %s", pid, pc, exc)
            return _error("No se pudo obtener la instrucción", 404)
        return _json_reply(instruction.to_dict())

    def _free_space(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        return _json_reply(FreeSpace(self.manager.free_bytes()).to_dict())

    def _load_process(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            request = ProcessRequest.from_dict(_load(body))
        except ValueError as exc:
            self.logger.error("Error decodificando proceso: %s", exc)
            return _error("Error al decodificar el proceso recibido", 400)
        path = self.scripts_dir + request.path
        try:
            instructions = load_instructions(path)
        except ProcessError as exc:
            self.logger.error("Error cargando instrucciones para PID=%d: %s", request.pid, exc)
            return _error("Error al cargar las instrucciones", 500)
        try:
            self.manager.create_process(request.pid, request.size, instructions, path)
        except LookupError as exc:
            self.logger.error("Error creando proceso PID=%d: %s", request.pid, exc)
            return _error(f"No se pudo cargar el proceso PID={request.pid}: {exc}", 409)
        return _json_reply("OK")

    def _write(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            request = WriteRequest.from_dict(_load(body))
        except ValueError as exc:
            self.logger.error("Error decodificando la solicitud de escritura: %s", exc)
            return _error("Error al decodificar la solicitud de escritura", 400)
        try:
            self.manager.write(request.pid, request.physical_address, request.data)
        except MemoryAccessError as exc:
            self.logger.error("escribirMemoriaUsuario: %s", exc)
        return _empty()

    def _read(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            request = ReadRequest.from_dict(_load(body))
        except ValueError as exc:
            self.logger.error("Error decodificando la solicitud de lectura: %s", exc)
            return _error("Error al decodificar la solicitud de lectura", 400)
        try:
            data = self.manager.read(request.pid, request.physical_address, request.size)
        except MemoryAccessError as exc:
            self.logger.error("leerMemoriaUsuario: %s", exc)
            return _json_reply(None)
        return _json_reply(_b64(data))

    def _resume(self, body: bytes) -> Reply:
        self._delay(self.config.swap_delay)
        try:
            pid = decode_pid(body)
        except ValueError as exc:
            self.logger.error("HandlerDessuspenderProceso: %s", exc)
            return _error("Error al decodificar solicitud de des-suspensión", 400)
        try:
            self.manager.request_resume(pid)
        except (LookupError, SwapError) as exc:
            self.logger.debug("HandlerDessuspenderProceso: falló: %s", exc)
            return _error(f"No se pudo des-suspender PID={pid}: {exc}", 409)
        return _json_reply("OK")

    def _suspend(self, body: bytes) -> Reply:
        self._delay(self.config.swap_delay)
        try:
            pid = decode_pid(body)
        except ValueError as exc:
            self.logger.error("HandlerSuspenderProceso: %s", exc)
            return _error("Error al decodificar solicitud de suspensión", 400)
        try:
            self.manager.suspend(pid)
        except (LookupError, SwapError) as exc:
            self.logger.error("HandlerSuspenderProceso: falló para PID=%d: %s", pid, exc)
            return _error(f"No se pudo suspender PID={pid}: {exc}", 409)
        return _json_reply("OK")

    def _finalize(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            pid = decode_pid(body)
        except ValueError as exc:
            self.logger.error("HandlerFinalizarProceso: %s", exc)
            return _error("Error al decodificar solicitud de finalización", 400)
        self.manager.finalize(pid)
        return _json_reply("OK")

    def _dump(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            pid = decode_pid(body)
        except ValueError as exc:
            self.logger.error("HandlerMemoryDump: %s", exc)
            return _error("Error al decodificar solicitud de dump", 400)
        try:
            dump_memory(self.manager, pid, self.config.dump_path)
        except DumpError as exc:
            self.logger.error("HandlerMemoryDump: DumpMemory falló: %s", exc)
            return _error(f"No se pudo generar dump para PID={pid}: {exc}", 500)
        return _json_reply(DumpResult(pid, "OK").to_dict())

    def _frame(self, body: bytes) -> Reply:
        self._delay(self.config.memory_delay)
        try:
            data = _object(body)
            pid = _int_field(data, "PID")
            indices = _lookup(data, "Indices")
            if indices is None:
                indices = []
            if not isinstance(indices, list) or not all(_is_int(i) for i in indices):
                raise ValueError("field 'Indices' must be a list of integers")
        except ValueError:
            return _error("Error al decodificar solicitud de marco", 400)
        accesses = table_accesses(
            self.config.number_of_levels, len(self.manager.frames_of(pid))
        )
        self._delay(self.config.memory_delay * accesses)
        try:
            frame = self.manager.frame_for(pid, indices)
        except LookupError as exc:
            self.logger.error("Marco: %s", exc)
            frame = -1
        return _json_reply(frame)

    def _page(self, body: bytes) -> Reply:
        try:
            address = _load(body)
            if not _is_int(address):
                raise ValueError(f"expected an integer address, got {address!r}")
        except ValueError as exc:
            self.logger.error("Error decodificando DF: %s", exc)
            return _error("Error al decodificar la solicitud de instruccion", 400)
        try:
            page = self.manager.page(address)
        except MemoryAccessError as exc:
            self.logger.error("[ObtenerPagina] %s", exc)
            page = b""
        return _json_reply(_b64(page))


def make_server(service: MemoryService, host: str, port: int) -> ThreadingHTTPServer:
    """An HTTP server that hands every request to ``service``."""

    class _Handler(BaseHTTPRequestHandler):
        def _serve(self) -> None:
            try:
                length = int(self.headers.get("Content-Length") or 0)
            except ValueError:
                length = 0
            body = self.rfile.read(length) if length > 0 else b""
            status, content_type, payload = service.handle(urlsplit(self.path).path, body)
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _serve

        def log_message(self, format: str, *args: Any) -> None:
            service.logger.debug(format, *args)

    return ThreadingHTTPServer((host, port), _Handler)


def main(argv: Sequence[str] | None = None) -> int:
    """Start the memory module with the configuration file named on the command line."""
    args = list(sys.argv if argv is None else argv)
    try:
        check_arguments(args, 2)
    except ArgumentError as exc:
        print(exc)
        return 1
    try:
        config = load_memory_config(args[1])
    except ConfigError:
        return 1
    try:
        level = parse_level(config.log_level)
    except LogLevelError:
        print("ERROR: El nivel de log ingresado no es valido")
        return 1
    try:
        logger = new_logger("memoria.log", level)
    except OSError:
        print("ERROR: No se pudo crear el logger")
        return 1
    try:
        try:
            manager = MemoryManager(config, logger)
        except ValueError as exc:
            logger.error("Configuración de memoria inválida: %s", exc)
            return 1
        try:
            manager.clear_swap()
        except SwapError as exc:
            logger.debug("LimpiarSwap: %s", exc)
        service = MemoryService(manager)
        try:
            server = make_server(service, "", config.port_memory)
        except OSError as exc:
            logger.error("Error al levantar el servidor: %s", exc)
            return 1
        logger.debug("Servidor de Memoria iniciándose en :%d", config.port_memory)
        with server:
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                pass
        return 0
    finally:
        close_logger(logger)


if __name__ == "__main__":
    logging.basicConfig()
    sys.exit(main())