"""GELF over UDP adapter implementing :class:`LogSinkPort`.

Purpose
-------
Ship one :class:`LogRecord` per datagram to a Graylog GELF/UDP input, matching
the framing Graylog expects from its reference writers.

Contents
--------
* :class:`GelfUdpSink` - compressing, chunking UDP writer.
* :data:`COMPRESSIONS` - accepted compression names.

System Role
-----------
Outermost sink of the delivery loop. Every transport failure surfaces as
:class:`~amqp2gelf.domain.errors.SinkError`, which the loop treats as fatal.

Alignment Notes
---------------
Payloads above ``chunk_size`` bytes are split into GELF chunks: the magic bytes
``0x1e 0x0f``, an 8 byte message id, the sequence number and the sequence count
followed by the data. Graylog drops messages with more than 128 chunks.
"""

from __future__ import annotations

import gzip
import logging
import os
import socket
import zlib
from collections.abc import Callable, Iterator

from amqp2gelf.application.ports.sink import LogSinkPort
from amqp2gelf.domain.errors import SinkError
from amqp2gelf.domain.record import LogRecord

logger = logging.getLogger(__name__)

COMPRESSIONS = ("gzip", "zlib", "none")
DEFAULT_CHUNK_SIZE = 1420
CHUNK_MAGIC = b"\x1e\x0f"
CHUNK_HEADER_SIZE = 12
MAX_CHUNKS = 128


class GelfUdpSink(LogSinkPort):
    """Write records to ``host:port`` as (optionally compressed) GELF datagrams.

    Examples
    --------
    >>> sink = GelfUdpSink(host="graylog.example", port=12201, compression="none")
    >>> sink.encode(LogRecord(short_message="hi"))[:20]
    b'{"version":"1.1","ho'
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        compression: str = "gzip",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float | None = 5.0,
        message_id: Callable[[], bytes] | None = None,
    ) -> None:
        """Configure the destination; the socket opens lazily or via :meth:`open`.

        Parameters
        ----------
        host, port:
            Graylog GELF/UDP input.
        compression:
            One of :data:`COMPRESSIONS`.
        chunk_size:
            Maximum datagram size including the chunk header.
        timeout:
            Socket timeout in seconds for each send.
        message_id:
            Source of 8 byte chunk message ids; random by default.
        """
        policy = compression.lower()
        if policy not in COMPRESSIONS:
            raise ValueError(f"compression must be one of {', '.join(COMPRESSIONS)}")
        if chunk_size <= CHUNK_HEADER_SIZE:
            raise ValueError(f"chunk_size must exceed {CHUNK_HEADER_SIZE} bytes")
        self._host = host
        self._port = port
        self._compression = policy
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._message_id = message_id or (lambda: os.urandom(8))
        self._socket: socket.socket | None = None
        self._address: tuple | None = None

    @property
    def endpoint(self) -> str:
        return f"{self._host}:{self._port}"

    def open(self) -> socket.socket:
        """Resolve the destination and create the datagram socket."""

        if self._socket is not None:
            return self._socket
        try:
            family, _type, _proto, _name, address = socket.getaddrinfo(self._host, self._port, type=socket.SOCK_DGRAM)[0]
            sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as exc:
            raise SinkError(f"Cannot create gelf writer for {self.endpoint}: {exc}") from exc
        if self._timeout is not None:
            sock.settimeout(self._timeout)
        self._socket = sock
        self._address = address
        return sock

    def send(self, record: LogRecord) -> None:
        """Encode ``record`` and write it as one datagram or a chunk sequence."""

        sock = self.open()
        data = self.encode(record)
        try:
            for datagram in self._datagrams(data):
                sock.sendto(datagram, self._address)
        except OSError as exc:
            raise SinkError(f"UDP write to {self.endpoint} failed: {exc}") from exc

    def close(self) -> None:
        sock = self._socket
        self._socket = None
        self._address = None
        if sock is not None:
            sock.close()

    def encode(self, record: LogRecord) -> bytes:
        """Return the compressed wire payload for ``record``."""

        try:
            payload = record.to_json()
        except ValueError as exc:
            raise SinkError(f"Cannot encode GELF message: {exc}") from exc
        if self._compression == "gzip":
            return gzip.compress(payload)
        if self._compression == "zlib":
            return zlib.compress(payload)
        return payload

    def _datagrams(self, data: bytes) -> Iterator[bytes]:
        if len(data) <= self._chunk_size:
            yield data
            return
        body_size = self._chunk_size - CHUNK_HEADER_SIZE
        count = -(-len(data) // body_size)
        if count > MAX_CHUNKS:
            raise SinkError(f"GELF message needs {count} chunks, limit is {MAX_CHUNKS}")
        message_id = self._message_id()
        logger.debug("Splitting %d byte GELF message into %d chunks", len(data), count)
        for sequence in range(count):
            chunk = data[sequence * body_size : (sequence + 1) * body_size]
            yield CHUNK_MAGIC + message_id + bytes((sequence, count)) + chunk


__all__ = ["COMPRESSIONS", "DEFAULT_CHUNK_SIZE", "GelfUdpSink"]
