"""
Sequential tokenization of delimited NPPES files.

The reader yields one ``RawRow`` per record. Quoting faults are reported
on the row instead of aborting the file, so the pipeline can apply its
skip/abort policy to them like any other row failure.
"""

import csv
from collections.abc import Iterator
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from types import TracebackType
from typing import TextIO

from nppes.errors import NppesFileNotFoundError, NppesIOError


@dataclass(frozen=True, slots=True)
class RawRow:
    """
    One tokenized data row.

    Attributes:
        number: 1-based data row number (the header is row 0).
        fields: Field values; empty when ``error`` is set.
        error: Tokenizer error for a structurally malformed row.
    """

    number: int
    fields: list[str]
    error: str | None = None


class DelimitedReader:
    """
    Reads a header and data rows from a CSV file.

    Use as a context manager::

        with DelimitedReader(path) as reader:
            header = reader.header()
            for chunk in reader.chunks(40_000):
                ...
    """

    def __init__(self, path: Path, *, encoding: str = "utf-8", delimiter: str = ",") -> None:
        self.path = path
        self.encoding = encoding
        self.delimiter = delimiter
        self._handle: TextIO | None = None
        self._reader: Iterator[list[str]] | None = None
        self._header: list[str] | None = None
        self._row_number = 0

    def __enter__(self) -> "DelimitedReader":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """
        Open the file.

        Raises:
            NppesFileNotFoundError: If the file does not exist.
            NppesIOError: If the file cannot be opened.
        """
        if not self.path.exists():
            raise NppesFileNotFoundError(self.path)
        try:
            # newline="" lets the csv module handle quoted line breaks.
            self._handle = self.path.open(encoding=self.encoding, newline="")
        except OSError as e:
            raise NppesIOError(self.path, str(e)) from e
        self._reader = csv.reader(self._handle, delimiter=self.delimiter, strict=True)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._reader = None

    def header(self) -> list[str]:
        """
        Read and tokenize the header line.

        Raises:
            NppesIOError: If the file is empty or the header is malformed.
        """
        if self._header is None:
            try:
                self._header = self._next_fields()
            except StopIteration:
                raise NppesIOError(self.path, "file is empty, no header row") from None
            except csv.Error as e:
                raise NppesIOError(self.path, f"malformed header: {e}") from e
        return self._header

    def rows(self) -> Iterator[RawRow]:
        """Yield data rows in file order, skipping blank lines."""
        self.header()
        while True:
            try:
                fields = self._next_fields()
            except StopIteration:
                return
            except csv.Error as e:
                self._row_number += 1
                yield RawRow(self._row_number, [], error=str(e))
                continue
            if not fields:
                continue
            self._row_number += 1
            yield RawRow(self._row_number, fields)

    def chunks(self, size: int) -> Iterator[list[RawRow]]:
        """Yield lists of at most ``size`` rows until the file is exhausted."""
        rows = self.rows()
        while chunk := list(islice(rows, size)):
            yield chunk

    def _next_fields(self) -> list[str]:
        """
        Tokenize the next record.

        StopIteration and csv.Error propagate; the csv reader resumes at
        the following line after an error.
        """
        if self._reader is None:
            msg = f"Reader for {self.path} is not open"
            raise RuntimeError(msg)
        try:
            return next(self._reader)
        except UnicodeDecodeError as e:
            raise NppesIOError(self.path, f"cannot decode file: {e}") from e
        except OSError as e:
            raise NppesIOError(self.path, str(e)) from e
