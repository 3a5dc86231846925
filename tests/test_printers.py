"""Tests for printer transports."""

import asyncio
import base64

import pytest
from aiohttp import web

from slipprint.models.printer import (
    BridgeConnection,
    PrinterConfig,
    PrinterType,
    SerialConnection,
    TCPConnection,
)
from slipprint.printers import BridgePrinter, EscPosPrinter, PrinterError, create_printer
from slipprint.printers.base import BasePrinter
from slipprint.printers.escpos import STATUS_QUERY


class MockPrinter(BasePrinter):
    """Mock printer for testing base class behavior."""

    def __init__(self, config: PrinterConfig):
        super().__init__(config)
        self.print_calls: list[bytes] = []

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def is_online(self) -> bool:
        return self._connected

    async def print_raw(self, data: bytes) -> None:
        self.print_calls.append(data)


@pytest.fixture
def tcp_config() -> PrinterConfig:
    """Create a TCP printer config for testing."""
    return PrinterConfig(name="counter", connection=TCPConnection(host="127.0.0.1", port=9100))


class TestCreatePrinter:
    """Tests for the create_printer factory function."""

    def test_create_escpos_printer(self, tcp_config):
        """ESC/POS configs create an EscPosPrinter."""
        printer = create_printer(tcp_config)
        assert isinstance(printer, EscPosPrinter)
        assert printer.name == "counter"
        assert printer.config == tcp_config

    def test_create_bridge_printer(self):
        """Bridge configs create a BridgePrinter."""
        config = PrinterConfig(
            name="bridge",
            type=PrinterType.BRIDGE,
            connection=BridgeConnection(bridge_url="http://localhost:8080", printer_ip="192.168.1.50"),
        )
        assert isinstance(create_printer(config), BridgePrinter)

    def test_bridge_requires_bridge_connection(self, tcp_config):
        """A bridge printer needs a bridge connection."""
        config = tcp_config.model_copy(update={"type": PrinterType.BRIDGE})
        with pytest.raises(PrinterError):
            create_printer(config)


class TestBasePrinter:
    """Tests for shared printer behavior."""

    async def test_context_manager(self, tcp_config):
        """The async context manager connects and disconnects."""
        printer = MockPrinter(tcp_config)
        async with printer:
            assert printer.is_connected
        assert not printer.is_connected


class TestEscPosPrinter:
    """Tests for the raw TCP transport against a local server."""

    async def _serve(self, reply: bytes = b""):
        received = bytearray()
        done = asyncio.Event()

        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            while chunk := await reader.read(1024):
                received.extend(chunk)
                if reply and STATUS_QUERY in received:
                    writer.write(reply)
                    await writer.drain()
            writer.close()
            done.set()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        return server, port, received, done

    async def test_print_raw_sends_bytes(self):
        """Jobs arrive on the socket unchanged."""
        server, port, received, done = await self._serve()
        config = PrinterConfig(name="p", connection=TCPConnection(host="127.0.0.1", port=port))

        async with server:
            async with EscPosPrinter(config) as printer:
                await printer.print_raw(b"\x1d\x76\x30\x00job")
            await asyncio.wait_for(done.wait(), timeout=5)

        assert bytes(received) == b"\x1d\x76\x30\x00job"

    async def test_is_online_with_status_reply(self):
        """A status byte reply means online."""
        server, port, _, _ = await self._serve(reply=b"\x16")
        config = PrinterConfig(name="p", connection=TCPConnection(host="127.0.0.1", port=port))

        async with server:
            printer = EscPosPrinter(config)
            try:
                assert await printer.is_online() is True
            finally:
                await printer.disconnect()

        assert printer.last_online is True

    async def test_print_without_connect(self, tcp_config):
        """Printing before connecting raises ConnectionError."""
        with pytest.raises(ConnectionError):
            await EscPosPrinter(tcp_config).print_raw(b"x")

    async def test_connect_refused(self):
        """Connection failures raise ConnectionError."""
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        config = PrinterConfig(name="p", connection=TCPConnection(host="127.0.0.1", port=port))
        with pytest.raises(ConnectionError):
            await EscPosPrinter(config).connect()

    async def test_is_online_unreachable(self):
        """Unreachable printers are reported offline, not raised."""
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        printer = EscPosPrinter(PrinterConfig(name="p", connection=TCPConnection(host="127.0.0.1", port=port)))
        assert await printer.is_online() is False
        assert printer.last_online is False

    async def test_serial_open_failure(self):
        """A missing serial device raises ConnectionError."""
        config = PrinterConfig(name="p", connection=SerialConnection(device="/dev/does-not-exist-slipprint"))
        with pytest.raises(ConnectionError):
            await EscPosPrinter(config).connect()


class TestBridgePrinter:
    """Tests for the HTTP bridge transport against a local aiohttp app."""

    async def _serve(self, status: int = 200, body: dict | None = None, delay: float = 0.0):
        requests: list[dict] = []

        async def print_bitmap(request: web.Request) -> web.Response:
            requests.append(await request.json())
            if delay:
                await asyncio.sleep(delay)
            return web.json_response(body if body is not None else {"success": True}, status=status)

        async def index(request: web.Request) -> web.Response:
            return web.Response(text="ok")

        app = web.Application()
        app.router.add_post("/print/bitmap", print_bitmap)
        app.router.add_get("/", index)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()
        port = runner.addresses[0][1]
        return runner, f"http://127.0.0.1:{port}", requests

    def _config(self, url: str, timeout: float = 10.0) -> PrinterConfig:
        return PrinterConfig(
            name="bridge",
            type=PrinterType.BRIDGE,
            connection=BridgeConnection(
                bridge_url=url + "/", printer_ip="192.168.1.50", printer_port=9100, timeout=timeout
            ),
        )

    async def test_print_posts_job(self):
        """Jobs are posted base64 encoded with the target printer."""
        runner, url, requests = await self._serve()
        try:
            async with BridgePrinter(self._config(url)) as printer:
                await printer.print_raw(b"\x1d\x76\x30\x00")
        finally:
            await runner.cleanup()

        assert requests == [
            {
                "ipAddress": "192.168.1.50",
                "port": 9100,
                "bitmapBase64": base64.b64encode(b"\x1d\x76\x30\x00").decode("ascii"),
                "feeds": 3,
            }
        ]

    async def test_non_200_raises(self):
        """Bridge errors raise ConnectionError."""
        runner, url, _ = await self._serve(status=500, body={"error": "printer offline"})
        try:
            async with BridgePrinter(self._config(url)) as printer:
                with pytest.raises(ConnectionError, match="500"):
                    await printer.print_raw(b"x")
        finally:
            await runner.cleanup()

    async def test_reported_failure_raises(self):
        """A 200 reply with success false raises PrinterError."""
        runner, url, _ = await self._serve(body={"success": False, "error": "paper out"})
        try:
            async with BridgePrinter(self._config(url)) as printer:
                with pytest.raises(PrinterError, match="paper out"):
                    await printer.print_raw(b"x")
        finally:
            await runner.cleanup()

    async def test_is_online(self):
        """A reachable bridge is online."""
        runner, url, _ = await self._serve()
        printer = BridgePrinter(self._config(url))
        try:
            assert await printer.is_online() is True
        finally:
            await printer.disconnect()
            await runner.cleanup()

    async def test_print_without_connect(self):
        """Printing before connecting raises ConnectionError."""
        printer = BridgePrinter(self._config("http://127.0.0.1:1"))
        with pytest.raises(ConnectionError):
            await printer.print_raw(b"x")

    async def test_slow_bridge_times_out(self):
        """A bridge slower than the timeout raises ConnectionError."""
        runner, url, _ = await self._serve(delay=2.0)
        try:
            async with BridgePrinter(self._config(url, timeout=0.3)) as printer:
                with pytest.raises(ConnectionError) as exc_info:
                    await printer.print_raw(b"x")
        finally:
            await runner.cleanup()

        assert isinstance(exc_info.value.__cause__, TimeoutError)
