"""
Inventory Edit Ports - Bridge to the inventory application's edit screen.

The port pattern lets us swap implementations (in-memory for testing,
dry-run for previews, UI automation in production) without changing
fix-up logic. A port addresses "the current screen", so it is only ever
driven through one EditSession at a time.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from .barcode import Ean13
from .errors import AutomationError, SessionBusyError

logger = logging.getLogger(__name__)


class InventoryEditPort(ABC):
    """
    Abstract interface for editing one inventory record at a time.

    Every operation may raise AutomationError.
    """

    _in_session = False

    @abstractmethod
    def open_item(self, sku: str) -> None:
        """Bring the record for sku onto the edit screen."""
        pass

    @abstractmethod
    def clear_barcodes(self) -> None:
        """Remove every barcode from the current record."""
        pass

    @abstractmethod
    def add_barcode(self, code: Ean13) -> None:
        """Append a barcode; the last one added is the primary."""
        pass

    @abstractmethod
    def read_field(self, index: int) -> str:
        """Read the text of a numbered field."""
        pass

    @abstractmethod
    def write_field(self, index: int, text: str) -> None:
        """Replace the text of a numbered field."""
        pass


class EditSession:
    """
    Exclusive handle on an edit port.

    Use as a context manager. Opening a second session on a port that is
    already in one raises SessionBusyError, so fix-ups cannot interleave.
    """

    def __init__(self, port: InventoryEditPort):
        self._port = port
        self._open = False

    def __enter__(self) -> "EditSession":
        if self._port._in_session:
            raise SessionBusyError(f"{type(self._port).__name__} is already in an edit session")
        self._port._in_session = True
        self._open = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self._open = False
        self._port._in_session = False
        return False

    @property
    def port(self) -> InventoryEditPort:
        if not self._open:
            raise SessionBusyError("Edit session is not open")
        return self._port

    def open_item(self, sku: str) -> None:
        self.port.open_item(sku)

    def clear_barcodes(self) -> None:
        self.port.clear_barcodes()

    def add_barcode(self, code: Ean13) -> None:
        self.port.add_barcode(code)

    def read_field(self, index: int) -> str:
        return self.port.read_field(index)

    def write_field(self, index: int, text: str) -> None:
        self.port.write_field(index, text)


@dataclass
class ScreenRecord:
    """State of one record as the edit screen shows it."""
    barcodes: list[str] = field(default_factory=list)
    fields: dict[int, str] = field(default_factory=dict)


class InMemoryEditPort(InventoryEditPort):
    """
    In-memory port for programmatic test setup.

    Records are created on first open. Failures can be injected per
    (sku, operation) to exercise error handling.
    """

    def __init__(
        self,
        records: Optional[dict[str, ScreenRecord]] = None,
        failures: Optional[set[tuple[str, str]]] = None,
    ):
        self.records = records or {}
        self.failures = failures or set()
        self.operations: list[tuple[str, str, str]] = []
        self._current: Optional[str] = None

    def _record(self, operation: str, detail: str = "") -> ScreenRecord:
        if self._current is None:
            raise AutomationError(operation, "no record open")
        if (self._current, operation) in self.failures:
            raise AutomationError(operation, f"injected failure for {self._current}")
        self.operations.append((self._current, operation, detail))
        return self.records[self._current]

    def open_item(self, sku: str) -> None:
        if (sku, "open_item") in self.failures:
            raise AutomationError("open_item", f"injected failure for {sku}")
        self._current = sku
        self.records.setdefault(sku, ScreenRecord())
        self.operations.append((sku, "open_item", ""))

    def clear_barcodes(self) -> None:
        self._record("clear_barcodes").barcodes.clear()

    def add_barcode(self, code: Ean13) -> None:
        self._record("add_barcode", str(code)).barcodes.append(str(code))

    def read_field(self, index: int) -> str:
        return self._record("read_field", str(index)).fields.get(index, "")

    def write_field(self, index: int, text: str) -> None:
        self._record("write_field", f"{index}={text}").fields[index] = text


class DryRunEditPort(InventoryEditPort):
    """
    Port that logs each operation instead of touching any application.

    Every field reads as empty.
    """

    def __init__(self):
        self.operation_count = 0
        self._current: Optional[str] = None

    def _log(self, message: str):
        self.operation_count += 1
        logger.info(f"[dry-run] {self._current}: {message}")

    def open_item(self, sku: str) -> None:
        self._current = sku
        self._log("open item")

    def clear_barcodes(self) -> None:
        self._log("clear barcodes")

    def add_barcode(self, code: Ean13) -> None:
        self._log(f"add barcode {code}")

    def read_field(self, index: int) -> str:
        return ""

    def write_field(self, index: int, text: str) -> None:
        self._log(f"field {index} = {text!r}")
