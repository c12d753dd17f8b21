"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter, PathCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import dispatch_command
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.parser import ParseError, parse_command

# Commands whose first argument is a local path
_PATH_COMMANDS = ("upload", "restore", "backup")


def build_completer() -> NestedCompleter:
    """Command names first, then local paths for commands that take one."""
    path_completer = PathCompleter(expanduser=True)
    return NestedCompleter.from_nested_dict(
        {name: (path_completer if name in _PATH_COMMANDS else None) for name in COMMANDS}
    )


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def handle_builtin(line: str) -> bool | None:
    """
    Run REPL-only commands.

    Returns:
        True if the line was handled, False to exit, None if it is not a builtin
    """
    if line == "exit":
        print("Goodbye!")
        return False
    if line == "help":
        print(HELP_TEXT)
        return True
    if line == "clear":
        clear_screen()
        show_welcome()
        return True
    return None


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=build_completer(), history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
            if not line:
                continue

            builtin = handle_builtin(line)
            if builtin is False:
                break
            if builtin:
                continue

            print(dispatch_command(parse_command(line)))

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
