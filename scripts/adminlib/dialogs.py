"""
Blocking user prompts built on flet.

Each helper opens a small flet window that hosts exactly one dialog, waits for
the user, closes the window and hands back the answer. Scripts can therefore
ask a question in the middle of an otherwise linear flow.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Sequence

import flet as ft

from .errors import DialogError
from .logging_utils import get_logger

logger = get_logger("adminkit.dialogs")

OK: tuple[str, ...] = ("OK",)
OK_CANCEL: tuple[str, ...] = ("OK", "Cancel")
YES_NO: tuple[str, ...] = ("Yes", "No")

ICON_INFO = ft.Icons.INFO_OUTLINE
ICON_WARNING = ft.Icons.WARNING_AMBER
ICON_ERROR = ft.Icons.ERROR_OUTLINE
ICON_QUESTION = ft.Icons.HELP_OUTLINE

_ICON_COLORS = {
    ICON_INFO: ft.Colors.BLUE,
    ICON_WARNING: ft.Colors.ORANGE,
    ICON_ERROR: ft.Colors.RED,
    ICON_QUESTION: ft.Colors.BLUE,
}

# None means "decide from ADMINKIT_NONINTERACTIVE"
_interactive: Optional[bool] = None


def set_interactive(value: Optional[bool]) -> None:
    """Force dialogs on/off for this process; None restores the env default."""
    global _interactive
    _interactive = value


def is_interactive() -> bool:
    if _interactive is not None:
        return _interactive
    flag = os.getenv("ADMINKIT_NONINTERACTIVE", "").strip().lower()
    return flag in ("", "0", "false", "no", "off")


def run_window(
    build: Callable[[ft.Page, Callable[[object], None]], None],
    *,
    title: str,
    width: int = 460,
    height: int = 220,
    default=None,
):
    """Run a flet app until ``finish`` is called or the window is closed."""
    outcome = {"value": default}

    def target(page: ft.Page) -> None:
        page.title = title
        page.theme_mode = ft.ThemeMode.DARK
        page.window.width = width
        page.window.height = height
        page.window.always_on_top = True

        def finish(value) -> None:
            outcome["value"] = value
            page.window.destroy()

        build(page, finish)
        page.update()

    try:
        ft.app(target=target)
    except Exception as exc:
        raise DialogError(f"Unable to open dialog window '{title}': {exc}") from exc
    return outcome["value"]


def show_message(
    message: str,
    title: str = "Message",
    buttons: Sequence[str] = OK,
    icon: str = ICON_INFO,
    *,
    interactive: Optional[bool] = None,
) -> Optional[str]:
    """Show a modal message box and return the label of the pressed button.

    Returns None when the window is closed without pressing a button. In
    non-interactive mode the message is logged and the last button (the
    negative choice) is returned.
    """
    if not buttons:
        raise ValueError("show_message needs at least one button")
    if interactive is None:
        interactive = is_interactive()
    if not interactive:
        logger.info("%s: %s", title, message)
        return buttons[-1]

    def build(page: ft.Page, finish) -> None:
        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Row(
                [
                    ft.Icon(icon, color=_ICON_COLORS.get(icon, ft.Colors.BLUE)),
                    ft.Text(title),
                ],
                spacing=8,
            ),
            content=ft.Text(message, selectable=True),
            actions=[
                ft.TextButton(label, on_click=lambda _, label=label: finish(label))
                for label in buttons
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        page.overlay.append(dialog)
        dialog.open = True

    return run_window(build, title=title)


def confirm(message: str, title: str = "Confirm", *, interactive: Optional[bool] = None) -> bool:
    return show_message(message, title, YES_NO, ICON_QUESTION, interactive=interactive) == "Yes"


def _normalize_extensions(extensions: Optional[Sequence[str]]) -> Optional[list[str]]:
    if not extensions:
        return None
    return [ext.strip().lstrip("*").lstrip(".").lower() for ext in extensions if ext.strip()]


def _run_picker(title: str, invoke: Callable[[ft.FilePicker], None]) -> Optional[Path]:
    def build(page: ft.Page, finish) -> None:
        def on_result(e: ft.FilePickerResultEvent) -> None:
            if e.files:
                finish(e.files[0].path)
            elif e.path:
                finish(e.path)
            else:
                finish(None)

        picker = ft.FilePicker(on_result=on_result)
        page.overlay.append(picker)
        page.add(ft.Text(title))
        page.update()
        invoke(picker)

    chosen = run_window(build, title=title, width=420, height=120)
    return Path(chosen) if chosen else None


def open_file_dialog(
    title: str = "Open File",
    initial_dir: Optional[Path | str] = None,
    extensions: Optional[Sequence[str]] = None,
    *,
    interactive: Optional[bool] = None,
) -> Optional[Path]:
    """Ask for an existing file. Returns None when cancelled."""
    if interactive is None:
        interactive = is_interactive()
    if not interactive:
        logger.info("%s: skipped (non-interactive)", title)
        return None
    allowed = _normalize_extensions(extensions)
    return _run_picker(
        title,
        lambda picker: picker.pick_files(
            dialog_title=title,
            initial_directory=str(initial_dir) if initial_dir else None,
            file_type=ft.FilePickerFileType.CUSTOM if allowed else ft.FilePickerFileType.ANY,
            allowed_extensions=allowed,
            allow_multiple=False,
        ),
    )


def save_file_dialog(
    title: str = "Save File",
    file_name: Optional[str] = None,
    initial_dir: Optional[Path | str] = None,
    extensions: Optional[Sequence[str]] = None,
    *,
    interactive: Optional[bool] = None,
) -> Optional[Path]:
    """Ask for a destination file. Returns None when cancelled."""
    if interactive is None:
        interactive = is_interactive()
    if not interactive:
        logger.info("%s: skipped (non-interactive)", title)
        return None
    allowed = _normalize_extensions(extensions)
    chosen = _run_picker(
        title,
        lambda picker: picker.save_file(
            dialog_title=title,
            file_name=file_name,
            initial_directory=str(initial_dir) if initial_dir else None,
            file_type=ft.FilePickerFileType.CUSTOM if allowed else ft.FilePickerFileType.ANY,
            allowed_extensions=allowed,
        ),
    )
    if chosen is None:
        return None
    return ensure_extension(chosen, allowed)


def ensure_extension(path: Path, extensions: Optional[Sequence[str]]) -> Path:
    """Append the first allowed extension when ``path`` has none of them."""
    allowed = _normalize_extensions(extensions)
    if not allowed:
        return path
    if path.suffix.lstrip(".").lower() in allowed:
        return path
    return path.with_name(f"{path.name}.{allowed[0]}")


def pick_folder_dialog(
    title: str = "Select Folder",
    initial_dir: Optional[Path | str] = None,
    *,
    interactive: Optional[bool] = None,
) -> Optional[Path]:
    """Ask for a directory. Returns None when cancelled."""
    if interactive is None:
        interactive = is_interactive()
    if not interactive:
        logger.info("%s: skipped (non-interactive)", title)
        return None
    return _run_picker(
        title,
        lambda picker: picker.get_directory_path(
            dialog_title=title,
            initial_directory=str(initial_dir) if initial_dir else None,
        ),
    )
