"""Direct ESC/POS printers on a raw socket or a serial line."""

import asyncio
import logging

import serial

from slipprint.models.printer import PrinterConfig, SerialConnection, TCPConnection
from slipprint.printers.base import BasePrinter, PrinterError

logger = logging.getLogger(__name__)

# DLE EOT 1: real-time printer status, answered with a single byte
STATUS_QUERY = b"\x10\x04\x01"

CONNECT_TIMEOUT = 5.0
STATUS_TIMEOUT = 2.0


class _SocketLink:
    """Raw TCP link, usually to port 9100."""

    def __init__(self, conn: TCPConnection) -> None:
        self.conn = conn
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    def __str__(self) -> str:
        return f"{self.conn.host}:{self.conn.port}"

    async def open(self) -> None:
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.conn.host, self.conn.port),
                timeout=CONNECT_TIMEOUT,
            )
        except TimeoutError as e:
            raise ConnectionError(f"Timed out connecting to {self}") from e
        except OSError as e:
            raise ConnectionError(f"Cannot connect to {self}: {e}") from e

    async def close(self) -> None:
        if self.writer is None:
            return
        writer, self.writer, self.reader = self.writer, None, None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Ignoring error closing {self}: {e}")

    async def write(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()

    async def read(self, size: int, timeout: float) -> bytes:
        try:
            return await asyncio.wait_for(self.reader.read(size), timeout=timeout)
        except TimeoutError:
            return b""


class _SerialLink:
    """Serial link; pyserial calls run in the default executor."""

    def __init__(self, conn: SerialConnection) -> None:
        self.conn = conn
        self.port: serial.Serial | None = None

    def __str__(self) -> str:
        return self.conn.device

    async def open(self) -> None:
        try:
            self.port = serial.Serial(
                port=self.conn.device,
                baudrate=self.conn.baudrate,
                bytesize=self.conn.bytesize,
                parity=self.conn.parity,
                stopbits=self.conn.stopbits,
                timeout=CONNECT_TIMEOUT,
            )
        except serial.SerialException as e:
            raise ConnectionError(f"Cannot open {self}: {e}") from e

    async def close(self) -> None:
        if self.port is not None:
            self.port.close()
            self.port = None

    async def write(self, data: bytes) -> None:
        await asyncio.get_running_loop().run_in_executor(None, self.port.write, data)

    async def read(self, size: int, timeout: float) -> bytes:
        self.port.timeout = timeout
        return await asyncio.get_running_loop().run_in_executor(None, self.port.read, size)


class EscPosPrinter(BasePrinter):
    """Receipt printer that takes ESC/POS bytes directly."""

    def __init__(self, config: PrinterConfig) -> None:
        super().__init__(config)
        conn = config.connection
        if isinstance(conn, TCPConnection):
            self._link: _SocketLink | _SerialLink = _SocketLink(conn)
        elif isinstance(conn, SerialConnection):
            self._link = _SerialLink(conn)
        else:
            raise PrinterError(f"Unsupported connection type for ESC/POS: {type(conn)}")

    async def connect(self) -> None:
        if not self._connected:
            await self._link.open()
            self._connected = True
            logger.debug(f"Printer {self.name}: connected to {self._link}")

    async def disconnect(self) -> None:
        await self._link.close()
        self._connected = False

    async def is_online(self) -> bool:
        """Send a DLE EOT status query; any reply byte means online."""
        try:
            await self.connect()
            await self._link.write(STATUS_QUERY)
            reply = await self._link.read(1, STATUS_TIMEOUT)
        except (ConnectionError, OSError, serial.SerialException) as e:
            logger.warning(f"Printer {self.name}: offline - {e}")
            await self.disconnect()
            reply = b""

        self.last_online = bool(reply)
        return self.last_online

    async def print_raw(self, data: bytes) -> None:
        if not self._connected:
            raise ConnectionError("Printer not connected")
        try:
            await self._link.write(data)
        except (OSError, serial.SerialException) as e:
            self._connected = False
            raise ConnectionError(f"Lost connection to {self._link}: {e}") from e
        logger.info(f"Printer {self.name}: sent {len(data)} bytes")
