"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from typing import Callable, Dict

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    handle_author,
    handle_download,
    handle_inspect,
    handle_progress,
    handle_upload,
)
from cli.completer import ChunkweaveCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    AuthorCommand,
    DownloadCommand,
    InspectCommand,
    ProgressCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command

HANDLERS: Dict[type, Callable[..., str]] = {
    UploadCommand: handle_upload,
    DownloadCommand: handle_download,
    InspectCommand: handle_inspect,
    ProgressCommand: handle_progress,
    AuthorCommand: handle_author,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj)


def _reset_screen() -> None:
    clear_screen()
    show_welcome()


BUILTINS: Dict[str, Callable[[], None]] = {
    "help": lambda: print(HELP_TEXT),
    "clear": _reset_screen,
}


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=ChunkweaveCompleter(), history=InMemoryHistory(), style=STYLE
    )

    _reset_screen()

    while True:
        try:
            line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break

        if not line:
            continue
        if line == "exit":
            print("Goodbye!")
            break
        if line in BUILTINS:
            BUILTINS[line]()
            continue

        try:
            print(dispatch_command(parse_command(line)))
        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            print("\nInterrupted. Run the same upload again to resume.")
