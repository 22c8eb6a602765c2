"""Rich panels for info, warning, error and success messages."""

from rich.panel import Panel

from scopeguard.cli.formatters import console

_PANEL_COLOURS = {
    "info": "blue",
    "warning": "yellow",
    "error": "red",
    "success": "green",
}


def message_panel(message: str, title: str, style: str = "info", *, expand: bool = False) -> Panel:
    """Create a panel for ``message`` using one of the theme's semantic styles.

    Args:
        message: Panel body; rich markup is allowed.
        title: Panel title.
        style: One of "info", "warning", "error", "success".
        expand: Whether to stretch to the full terminal width.
    """
    colour = _PANEL_COLOURS.get(style, "blue")
    return Panel(
        f"[{style}]{message}[/]",
        title=f"[bold {colour}]{title}[/]",
        border_style=colour,
        expand=expand,
    )


def print_info(message: str, title: str = "Info") -> None:
    console.print(message_panel(message, title, "info"))


def print_warning(message: str, title: str = "Warning") -> None:
    console.print(message_panel(message, title, "warning"))


def print_error(message: str, title: str = "Error") -> None:
    console.print(message_panel(message, title, "error"))


def print_success(message: str, title: str = "Success") -> None:
    console.print(message_panel(message, title, "success"))


__all__ = [
    "message_panel",
    "print_info",
    "print_warning",
    "print_error",
    "print_success",
]
