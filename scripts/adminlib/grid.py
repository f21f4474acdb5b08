from __future__ import annotations

import functools
import math
import re
from datetime import date, datetime
from pathlib import Path
from typing import Mapping, Optional, Sequence

import flet as ft

from . import dialogs
from .errors import ExportError, report_failure
from .file_ops import collect_columns, export_csv
from .logging_utils import get_logger, record_error

logger = get_logger("adminkit.grid")


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _as_number(value) -> Optional[float]:
    # "nan", "inf" and "1_000" are text in a CSV cell
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and _DECIMAL.fullmatch(value.strip()):
        number = float(value.strip())
    else:
        return None
    return number if math.isfinite(number) else None


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def compare_values(a, b) -> int:
    """Comparator for grid cells: numbers numerically, text case-insensitively.

    Numbers sort before text and empty cells sort after everything else.
    """
    a_empty, b_empty = _is_empty(a), _is_empty(b)
    if a_empty or b_empty:
        return _sign(a_empty, b_empty)

    if isinstance(a, (datetime, date)) and type(a) is type(b):
        return _sign(a, b)

    a_num, b_num = _as_number(a), _as_number(b)
    if a_num is not None and b_num is not None:
        return _sign(a_num, b_num)
    if a_num is not None:
        return -1
    if b_num is not None:
        return 1

    return _sign(str(a).casefold(), str(b).casefold())


class SortableGrid:
    """Rows plus the sort state of the grid that displays them."""

    def __init__(self, rows: Sequence[Mapping], columns: Optional[Sequence[str]] = None) -> None:
        self._rows = list(rows)
        # display order as positions into _rows; a position identifies a row
        self._order = list(range(len(self._rows)))
        self.columns = list(columns) if columns is not None else collect_columns(self._rows)
        self.sort_column: Optional[str] = None
        self.ascending = True

    @property
    def rows(self) -> list[Mapping]:
        return [self._rows[index] for index in self._order]

    def indexed_rows(self) -> list[tuple[int, Mapping]]:
        """Rows in display order, each with its position in the input."""
        return [(index, self._rows[index]) for index in self._order]

    def cell(self, row: Mapping, column: str) -> str:
        value = row.get(column)
        return "" if value is None else str(value)

    def sort_by(self, column: str) -> list[Mapping]:
        """Sort by ``column``; sorting the same column again flips direction."""
        if column not in self.columns:
            raise KeyError(column)
        if column == self.sort_column:
            self.ascending = not self.ascending
        else:
            self.sort_column = column
            self.ascending = True

        ascending = self.ascending

        def compare(left: int, right: int) -> int:
            a, b = self._rows[left].get(column), self._rows[right].get(column)
            if _is_empty(a) or _is_empty(b):
                # empties stay at the bottom in both directions
                return compare_values(a, b)
            result = compare_values(a, b)
            return result if ascending else -result

        self._order.sort(key=functools.cmp_to_key(compare))
        return self.rows


def prompt_export_csv(
    rows: Sequence[Mapping],
    columns: Optional[Sequence[str]] = None,
    title: str = "Export to CSV",
    file_name: str = "export.csv",
    *,
    interactive: Optional[bool] = None,
) -> Optional[Path]:
    """Ask for a destination and export ``rows``; None when cancelled or failed."""
    path = dialogs.save_file_dialog(title, file_name, extensions=["csv"], interactive=interactive)
    if path is None:
        logger.info("Export cancelled")
        return None
    try:
        return export_csv(rows, path, columns)
    except ExportError as exc:
        report_failure(exc, "Export Failed", interactive=interactive)
        return None


def show_grid(
    rows: Sequence[Mapping],
    title: str = "Results",
    columns: Optional[Sequence[str]] = None,
    *,
    pass_thru: bool = False,
    interactive: Optional[bool] = None,
) -> list[Mapping]:
    """Display ``rows`` in a sortable table window.

    Clicking a column header sorts by that column (again to reverse). With
    ``pass_thru`` the rows ticked by the user are returned when OK is pressed;
    otherwise the result is always empty.
    """
    grid = SortableGrid(rows, columns)
    if not grid.rows:
        logger.info("%s: no rows to display", title)
        return []
    if interactive is None:
        interactive = dialogs.is_interactive()
    if not interactive:
        logger.info("%s: %d row(s), grid skipped (non-interactive)", title, len(grid.rows))
        return []

    selected: set[int] = set()

    def build(page: ft.Page, finish) -> None:
        table = ft.DataTable(
            columns=[],
            rows=[],
            show_checkbox_column=pass_thru,
            heading_row_color=ft.Colors.SURFACE,
        )
        status = ft.Text(f"{len(grid.rows)} row(s)", size=12)

        def render() -> None:
            table.sort_column_index = grid.columns.index(grid.sort_column) if grid.sort_column else None
            table.sort_ascending = grid.ascending
            table.rows = [
                ft.DataRow(
                    cells=[ft.DataCell(ft.Text(grid.cell(row, column), selectable=True)) for column in grid.columns],
                    selected=index in selected,
                    on_select_changed=(lambda e, key=index: on_row_selected(key, e)) if pass_thru else None,
                )
                for index, row in grid.indexed_rows()
            ]
            if pass_thru:
                status.value = f"{len(grid.rows)} row(s), {len(selected)} selected"

        def on_sort(e: ft.DataColumnSortEvent) -> None:
            grid.sort_by(grid.columns[e.column_index])
            render()
            page.update()

        def on_row_selected(key: int, e) -> None:
            if e.data == "true":
                selected.add(key)
            else:
                selected.discard(key)
            render()
            page.update()

        def show_snackbar(message: str, bgcolor=ft.Colors.BLUE) -> None:
            page.snack_bar = ft.SnackBar(content=ft.Text(message), bgcolor=bgcolor)
            page.snack_bar.open = True
            page.update()

        def on_export_selected(e: ft.FilePickerResultEvent) -> None:
            if not e.path:
                return
            path = dialogs.ensure_extension(Path(e.path), ["csv"])
            try:
                export_csv(grid.rows, path, grid.columns)
            except ExportError as exc:
                record_error(exc.tag, str(exc), exc)
                show_snackbar(f"Export failed: {exc}", ft.Colors.RED)
                return
            show_snackbar(f"Exported to {path}", ft.Colors.GREEN)

        table.columns = [ft.DataColumn(ft.Text(column), on_sort=on_sort) for column in grid.columns]
        render()

        export_picker = ft.FilePicker(on_result=on_export_selected)
        page.overlay.append(export_picker)

        def on_done(_) -> None:
            finish([row for index, row in grid.indexed_rows() if index in selected] if pass_thru else [])

        buttons = [
            ft.ElevatedButton(
                "Export CSV",
                icon=ft.Icons.SAVE_ALT,
                on_click=lambda _: export_picker.save_file(
                    dialog_title="Export to CSV",
                    file_name=f"{title}.csv",
                    file_type=ft.FilePickerFileType.CUSTOM,
                    allowed_extensions=["csv"],
                ),
            ),
            ft.ElevatedButton("OK", on_click=on_done),
        ]
        if pass_thru:
            buttons.append(ft.TextButton("Cancel", on_click=lambda _: finish([])))

        page.add(
            ft.Column(
                [
                    ft.Column(
                        [ft.Row([table], scroll=ft.ScrollMode.AUTO)],
                        scroll=ft.ScrollMode.AUTO,
                        expand=True,
                    ),
                    ft.Row(
                        [status, ft.Row(buttons, spacing=10)],
                        alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                    ),
                ],
                expand=True,
            )
        )

    chosen = dialogs.run_window(build, title=title, width=900, height=600, default=[])
    return list(chosen or [])
