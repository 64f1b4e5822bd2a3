import pyperclip

from yochat.errors import ClipboardError


def copy_to_clipboard(text: str) -> None:
    """Place text on the system clipboard."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(str(e)) from e
