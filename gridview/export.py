"""Flat (CSV) export of a grid's rows."""

from __future__ import annotations

import csv
import tempfile

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .log import info


if TYPE_CHECKING:
    from collections.abc import Sequence

    from .columns import ColumnRegistry
    from .state import GridState


class Spreadsheet:
    """A CSV file in the temp directory, written row by row.

    The file is kept after ``close`` so the caller can stream it to the
    client; removing it is the caller's job.
    """

    def __init__(self, name: str, separator: str = ",") -> None:
        self.name = name
        self._file = tempfile.NamedTemporaryFile(  # noqa: SIM115
            mode="w",
            prefix=f"{name}_",
            suffix=".csv",
            newline="",
            encoding="utf-8",
            delete=False,
        )
        self._writer = csv.writer(self._file, delimiter=separator)
        self.path = Path(self._file.name)

    def write_row(self, values: Sequence[Any]) -> None:
        """Append one record; None becomes an empty field."""
        self._writer.writerow(["" if v is None else v for v in values])

    def close(self) -> None:
        """Flush and close the underlying file."""
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> Spreadsheet:
        return self

    def discard(self) -> None:
        """Close and delete the file."""
        self.close()
        self.path.unlink(missing_ok=True)

    def __exit__(self, exc_type: type[BaseException] | None, *exc_info: object) -> None:
        # A failed export leaves no partial file behind
        if exc_type is not None:
            self.discard()
        else:
            self.close()


def write_export(
    state: GridState,
    columns: ColumnRegistry,
    separator: str = ",",
) -> Path:
    """Write the header and every row of ``state`` to a new CSV file.

    Cells are evaluated exactly as in table mode; attributes returned with a
    cell value are dropped.

    Returns
    -------
    Path
        Location of the written file, also stored on the state.
    """
    with Spreadsheet(state.name, separator) as spreadsheet:
        spreadsheet.write_row(columns.column_labels("export"))
        export_columns = list(columns.for_mode("export"))
        for row in state.iter_rows():
            spreadsheet.write_row([column.evaluate(row, state.params).value for column in export_columns])

    state.set_export_path(spreadsheet.path)
    info(f"Exported {state.page_length} rows of grid '{state.name}' to {spreadsheet.path}")
    return spreadsheet.path
