"""Printer transports for slipprint."""

from slipprint.models.printer import PrinterConfig, PrinterType
from slipprint.printers.base import BasePrinter, PrinterError
from slipprint.printers.bridge import BridgePrinter
from slipprint.printers.escpos import EscPosPrinter

__all__ = [
    "BasePrinter",
    "BridgePrinter",
    "EscPosPrinter",
    "PrinterError",
    "create_printer",
]


def create_printer(config: PrinterConfig) -> BasePrinter:
    """Factory function to create a printer instance from config."""
    printer_classes = {
        PrinterType.ESCPOS: EscPosPrinter,
        PrinterType.BRIDGE: BridgePrinter,
    }
    printer_class = printer_classes.get(config.type)
    if not printer_class:
        raise ValueError(f"Unknown printer type: {config.type}")
    return printer_class(config)
