"""Printer configuration models."""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class PrinterType(StrEnum):
    """Supported printer types."""

    ESCPOS = "escpos"
    BRIDGE = "bridge"


class TCPConnection(BaseModel):
    """Raw TCP/IP connection (port 9100 on most receipt printers)."""

    type: Literal["tcp"] = "tcp"
    host: str
    port: int = 9100


class SerialConnection(BaseModel):
    """Serial port connection configuration."""

    type: Literal["serial"] = "serial"
    device: str
    baudrate: int = 9600
    bytesize: int = 8
    parity: str = "N"
    stopbits: float = 1


class BridgeConnection(BaseModel):
    """HTTP print bridge that forwards raster jobs to a network printer."""

    type: Literal["bridge"] = "bridge"
    bridge_url: str
    printer_ip: str
    printer_port: int = 9100
    timeout: float = 10.0


ConnectionConfig = Annotated[
    TCPConnection | SerialConnection | BridgeConnection,
    Field(discriminator="type"),
]


class PrinterConfig(BaseModel):
    """Configuration for a single printer."""

    name: str
    type: PrinterType = PrinterType.ESCPOS
    connection: ConnectionConfig
    enabled: bool = True
