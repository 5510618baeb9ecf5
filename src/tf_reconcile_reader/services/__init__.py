"""Effect runners: shell commands, external editor and clipboard."""

from tf_reconcile_reader.services.clipboard_service import copy_to_clipboard, write_clipboard
from tf_reconcile_reader.services.editor_service import edit_text
from tf_reconcile_reader.services.shell_service import prepare_command, run_command

__all__ = [
    "copy_to_clipboard",
    "edit_text",
    "prepare_command",
    "run_command",
    "write_clipboard",
]
