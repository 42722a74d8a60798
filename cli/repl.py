"""Interactive shell for a p2pshare peer, built on prompt_toolkit."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    close_session,
    handle_download,
    handle_files,
    handle_list,
    handle_peers,
    handle_share,
    handle_start,
    handle_stop,
    handle_unshare,
)
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    DownloadCommand,
    FilesCommand,
    ListCommand,
    PeersCommand,
    ShareCommand,
    StartCommand,
    StopCommand,
    UnshareCommand,
)
from cli.parser import ParseError, parse_command

HANDLERS = {
    StartCommand: handle_start,
    StopCommand: handle_stop,
    ShareCommand: handle_share,
    UnshareCommand: handle_unshare,
    ListCommand: handle_list,
    FilesCommand: handle_files,
    PeersCommand: handle_peers,
    DownloadCommand: handle_download,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj, session=None) -> str:
    """Dispatch parsed command to its handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, session)


def repl_loop() -> None:
    """Start interactive REPL. The local peer is stopped on exit."""
    completer = WordCompleter(COMMANDS, ignore_case=True)
    prompt_session: PromptSession = PromptSession(
        completer=completer, history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome()

    try:
        while True:
            try:
                user_input = prompt_session.prompt([("class:prompt", PROMPT_TEXT)])
                command = user_input.strip()

                if not command:
                    continue

                if command == "exit":
                    print("Goodbye!")
                    break

                if command == "help":
                    print(HELP_TEXT)
                    continue

                if command == "clear":
                    clear_screen()
                    show_welcome()
                    continue

                print(dispatch_command(parse_command(user_input)))

            except ParseError as e:
                print(f"Error: {e}")
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        close_session()
