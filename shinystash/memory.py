from __future__ import annotations

"""Access to the game's memory through a pluggable backend.

Two backends are provided: :class:`SysBotMemory` talks to the sys-botbase
sysmodule over TCP, :class:`SnapshotMemory` serves previously captured
regions and is what the tests use.
"""

import logging
import socket
import struct
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Protocol

from .errors import MemoryAccessError, TargetUnavailable

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6000


@dataclass(frozen=True)
class ProcessMetadata:
    title_id: int
    build_id: bytes
    main_base: int

    @property
    def build_id_hex(self) -> str:
        return self.build_id.hex().upper()


class MemoryBackend(Protocol):
    def is_target_available(self) -> bool: ...

    def open_session(self): ...

    def get_process_metadata(self, session) -> ProcessMetadata: ...

    def read_bytes(self, session, address: int, length: int) -> bytes: ...

    def close_session(self, session) -> None: ...


class SwitchMemory:
    """Reads bound to one open backend session."""

    def __init__(self, backend: MemoryBackend, session) -> None:
        self.backend = backend
        self.session = session

    def metadata(self) -> ProcessMetadata:
        return self.backend.get_process_metadata(self.session)

    def read_bytes(self, address: int, length: int) -> bytes:
        data = self.backend.read_bytes(self.session, address, length)
        if len(data) != length:
            raise MemoryAccessError(
                f"Short read at 0x{address:X}: {len(data)} of {length} bytes"
            )
        return data

    def read_u64(self, address: int) -> int:
        return struct.unpack("<Q", self.read_bytes(address, 8))[0]


@contextmanager
def memory_session(backend: MemoryBackend) -> Iterator[SwitchMemory]:
    """Open a session on ``backend`` and close it on every exit path."""

    if not backend.is_target_available():
        raise TargetUnavailable("No game process (is sys-botbase running?)")
    session = backend.open_session()
    logger.debug("Memory session opened")
    try:
        yield SwitchMemory(backend, session)
    finally:
        backend.close_session(session)
        logger.debug("Memory session closed")


# sys-botbase ------------------------------------------------------------
@dataclass
class SysBotSession:
    sock: socket.socket
    reader: object


class SysBotMemory:
    """Client for the sys-botbase text protocol.

    Commands are ASCII lines terminated by ``\\r\\n``; every query used here
    answers with a single line of hexadecimal text.
    """

    def __init__(
        self, host: str, port: int = DEFAULT_PORT, timeout: float = 5.0
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def _connect(self) -> socket.socket:
        return socket.create_connection((self.host, self.port), timeout=self.timeout)

    def is_target_available(self) -> bool:
        try:
            sock = self._connect()
        except OSError as exc:
            logger.debug("sys-botbase at %s:%d unreachable: %s", self.host, self.port, exc)
            return False
        sock.close()
        return True

    def open_session(self) -> SysBotSession:
        try:
            sock = self._connect()
        except OSError as exc:
            raise TargetUnavailable(
                f"Can't connect to {self.host}:{self.port}"
            ) from exc
        logger.info("Connected to sys-botbase at %s:%d", self.host, self.port)
        return SysBotSession(sock, sock.makefile("rb"))

    def _query(self, session: SysBotSession, command: str) -> str:
        try:
            session.sock.sendall(command.encode("ascii") + b"\r\n")
            line = session.reader.readline()
        except OSError as exc:
            raise MemoryAccessError(f"{command!r} failed: {exc}") from exc
        if not line:
            raise MemoryAccessError(f"{command!r}: connection closed")
        return line.decode("ascii", "replace").strip()

    def _query_hex(self, session: SysBotSession, command: str) -> bytes:
        reply = self._query(session, command)
        try:
            return bytes.fromhex(reply)
        except ValueError as exc:
            raise MemoryAccessError(f"{command!r}: unexpected reply {reply[:32]!r}") from exc

    def _query_int(self, session: SysBotSession, command: str) -> int:
        reply = self._query(session, command)
        try:
            return int(reply, 16)
        except ValueError as exc:
            raise MemoryAccessError(f"{command!r}: unexpected reply {reply[:32]!r}") from exc

    def get_process_metadata(self, session: SysBotSession) -> ProcessMetadata:
        title_id = self._query_int(session, "getTitleID")
        build_id = self._query_hex(session, "getBuildID")[:8]
        main_base = self._query_int(session, "getMainNsoBase")
        return ProcessMetadata(title_id, build_id, main_base)

    def read_bytes(self, session: SysBotSession, address: int, length: int) -> bytes:
        return self._query_hex(session, f"peekAbsolute 0x{address:X} {length}")

    def close_session(self, session: SysBotSession) -> None:
        session.reader.close()
        session.sock.close()


# Captured memory ---------------------------------------------------------
@dataclass
class SnapshotMemory:
    """Serve reads from captured regions keyed by start address."""

    metadata: ProcessMetadata
    regions: Dict[int, bytes] = field(default_factory=dict)
    available: bool = True
    open_sessions: int = 0

    def add_region(self, address: int, data: bytes) -> None:
        self.regions[address] = bytes(data)

    def write_u64(self, address: int, value: int) -> None:
        self.add_region(address, struct.pack("<Q", value))

    def is_target_available(self) -> bool:
        return self.available

    def open_session(self) -> Optional[int]:
        self.open_sessions += 1
        return self.open_sessions

    def get_process_metadata(self, session) -> ProcessMetadata:
        return self.metadata

    def read_bytes(self, session, address: int, length: int) -> bytes:
        for start, data in self.regions.items():
            if start <= address and address + length <= start + len(data):
                offset = address - start
                return data[offset : offset + length]
        raise MemoryAccessError(f"0x{address:X}+{length} is not mapped")

    def close_session(self, session) -> None:
        self.open_sessions -= 1
