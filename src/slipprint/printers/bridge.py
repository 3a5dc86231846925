"""Print bridge transport: posts raster jobs to an HTTP bridge service."""

import base64
import logging

import aiohttp

from slipprint.models.printer import BridgeConnection, PrinterConfig
from slipprint.printers.base import BasePrinter, PrinterError

logger = logging.getLogger(__name__)


class BridgePrinter(BasePrinter):
    """Sends ESC/POS jobs through an HTTP print bridge.

    The bridge exposes ``POST /print/bitmap`` taking the target printer's
    address and the job as base64, and forwards the bytes over TCP.
    """

    def __init__(self, config: PrinterConfig) -> None:
        super().__init__(config)
        if not isinstance(config.connection, BridgeConnection):
            raise PrinterError(f"Unsupported connection type for bridge: {type(config.connection)}")
        self._conn: BridgeConnection = config.connection
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._conn.bridge_url.rstrip("/")

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._connected:
            return
        self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._conn.timeout))
        self._connected = True

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
        self._connected = False

    async def is_online(self) -> bool:
        """Check that the bridge answers HTTP at all."""
        if not self._connected:
            await self.connect()

        try:
            async with self._session.get(self.base_url) as resp:
                online = resp.status < 500
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.warning(f"Printer {self.name}: bridge unreachable - {e}")
            online = False

        self.last_online = online
        return online

    async def print_raw(self, data: bytes, feeds: int = 3) -> None:
        """Post a job to the bridge.

        Raises:
            ConnectionError: If not connected, unreachable, or the bridge refuses the job.
        """
        if not self._session:
            raise ConnectionError("Printer not connected")

        payload = {
            "ipAddress": self._conn.printer_ip,
            "port": self._conn.printer_port,
            "bitmapBase64": base64.b64encode(data).decode("ascii"),
            "feeds": feeds,
        }
        try:
            async with self._session.post(f"{self.base_url}/print/bitmap", json=payload) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise ConnectionError(f"Bridge print failed: {resp.status} - {text}")
                result = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as e:
            raise ConnectionError(f"Failed to reach print bridge at {self.base_url}: {e!r}") from e

        if isinstance(result, dict) and result.get("success") is False:
            raise PrinterError(f"Bridge reported failure: {result.get('error', 'unknown error')}")
        logger.info(f"Printer {self.name}: sent {len(data)} bytes via bridge")
