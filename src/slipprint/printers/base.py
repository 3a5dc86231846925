"""Printer transport interface."""

from abc import ABC, abstractmethod

from slipprint.models.printer import PrinterConfig


class PrinterError(Exception):
    """Exception raised for printer-related errors."""

    pass


class BasePrinter(ABC):
    """Delivers finished ESC/POS jobs to a printer.

    Transports only move bytes. They neither render nor retry; a failed
    send raises and the caller decides what to do with the job.
    """

    def __init__(self, config: PrinterConfig) -> None:
        self.config = config
        self.name = config.name
        self._connected = False
        self.last_online: bool | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    async def connect(self) -> None:
        """Open the link to the printer.

        Raises:
            ConnectionError: If the printer cannot be reached.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the link. Safe to call when not connected."""

    @abstractmethod
    async def is_online(self) -> bool:
        """Probe the printer (or its bridge). Never raises for an unreachable device."""

    @abstractmethod
    async def print_raw(self, data: bytes) -> None:
        """Send a complete command buffer.

        Raises:
            ConnectionError: If not connected or the link drops.
            PrinterError: If the device rejects the job.
        """

    async def __aenter__(self) -> "BasePrinter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
