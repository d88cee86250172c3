"""
SIC/XE Object Program Records
=============================

This module defines the object program format produced by the assembler
and the writer that renders a resolved statement list into it.

Object Program Structure
------------------------
An object program is ASCII text, one record per line:

1. Header record (one)
2. Text records (zero or more)
3. End record (one)

Record Formats
--------------
**Header**:
    Col 1     H
    Col 2-7   Program name (space padded, truncated to 6)
    Col 8-13  Start address (hex)
    Col 14-19 Program length in bytes (hex)

**Text**:
    Col 1     T
    Col 2-7   Start address of the object code in this record (hex)
    Col 8-9   Length of the object code in bytes (hex)
    Col 10-69 Object code, at most 60 hex digits (30 bytes)

**End**:
    Col 1     E
    Col 2-7   Start address of the program (hex)

Example
-------
    HCOPY  001000001077
    T0010001E1720274B1000360320262900003320074B10003F2FEC0320100F2016
    E001000

Record Breaks
-------------
A Text record ends when the next object code would overflow it, when a
RESW/RESB reserves storage (the reserved area is not loaded), and when
object code stops being contiguous.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from sicxe_sdk.assembler.parser import Comment, Directive, Statement

# Logger for this module
logger = logging.getLogger(__name__)

TEXT_RECORD_LIMIT = 60


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class HeaderRecord:
    """Program name, load address and length."""
    name: str
    start: int
    length: int

    def __str__(self) -> str:
        return f"H{self.name[:6]:<6}{self.start:06X}{self.length:06X}"


@dataclass(frozen=True)
class TextRecord:
    """
    A run of object code loaded at a contiguous address range.

    Attributes:
        start: Load address of the first byte
        data: Object code as uppercase hex digits
    """
    start: int
    data: str

    @property
    def length(self) -> int:
        """Length of the object code in bytes."""
        return len(self.data) // 2

    @property
    def end(self) -> int:
        """Address just past the last byte."""
        return self.start + self.length

    def __str__(self) -> str:
        return f"T{self.start:06X}{self.length:02X}{self.data}"


@dataclass(frozen=True)
class EndRecord:
    """Address where execution starts."""
    start: int

    def __str__(self) -> str:
        return f"E{self.start:06X}"


@dataclass
class ObjectProgram:
    """
    A complete object program.

    Attributes:
        header: The H record
        texts: T records in address order
        end: The E record
    """
    header: HeaderRecord
    texts: list[TextRecord] = field(default_factory=list)
    end: Optional[EndRecord] = None

    def records(self) -> list:
        return [self.header, *self.texts, self.end]

    def to_text(self) -> str:
        """Render as object file text, one record per line."""
        return "".join(f"{record}\n" for record in self.records())

    def write(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.to_text())
        logger.info(f"Wrote {len(self.texts) + 2} records to {filepath}")


# =============================================================================
# Writer
# =============================================================================

class _TextRecordBuffer:
    """Accumulates object code until a record has to be closed."""

    def __init__(self, limit: int):
        self.limit = limit
        self.records: list[TextRecord] = []
        self._start = 0
        self._data = ""

    @property
    def next_address(self) -> int:
        return self._start + len(self._data) // 2

    def append(self, address: int, code: str) -> None:
        if self._data and (
            address != self.next_address
            or len(self._data) + len(code) > self.limit
        ):
            self.flush()

        # Object code longer than a whole record is split across records
        while code:
            if not self._data:
                self._start = address
            room = self.limit - len(self._data)
            chunk, code = code[:room], code[room:]
            self._data += chunk
            address += len(chunk) // 2
            if code:
                self.flush()

    def flush(self) -> None:
        if self._data:
            self.records.append(TextRecord(self._start, self._data))
            logger.debug(
                f"Text record at {self._start:06X}: {len(self._data) // 2} bytes"
            )
        self._data = ""


class ObjectWriter:
    """
    Renders resolved statements into an object program.

    Example:
        >>> writer = ObjectWriter()
        >>> program = writer.build(statements, "COPY", 0x1000, 0x1077)
        >>> print(program.to_text())
    """

    def __init__(self, text_record_limit: int = TEXT_RECORD_LIMIT):
        if text_record_limit < 2 or text_record_limit % 2:
            raise ValueError("text record limit must be a positive even number of hex digits")
        self.text_record_limit = text_record_limit

    def build(
        self,
        statements: list[Statement],
        name: str,
        start: int,
        length: int,
    ) -> ObjectProgram:
        """
        Build the object program.

        Args:
            statements: Statements in source order, symbols already resolved
            name: Program name (label of START)
            start: Program start address
            length: Program length in bytes

        Returns:
            The object program
        """
        buffer = _TextRecordBuffer(self.text_record_limit)

        for stmt in statements:
            if isinstance(stmt, Comment):
                continue
            if isinstance(stmt, Directive) and stmt.is_reserve:
                buffer.flush()
                continue
            code = stmt.assemble()
            if code:
                buffer.append(stmt.offset, code)

        buffer.flush()

        return ObjectProgram(
            header=HeaderRecord(name, start, length),
            texts=buffer.records,
            end=EndRecord(start),
        )
