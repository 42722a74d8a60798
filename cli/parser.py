"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DownloadCommand,
    FilesCommand,
    ListCommand,
    PeersCommand,
    ShareCommand,
    StartCommand,
    StopCommand,
    UnshareCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


# Commands whose argument is a raw file list; spacing inside it is significant.
RAW_ARGUMENT_COMMANDS = ("share", "unshare")


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    line = input_line.lstrip()
    if not line.strip():
        raise ParseError("Empty command")

    command_name, _, raw_args = line.partition(" ")

    if command_name in RAW_ARGUMENT_COMMANDS:
        return _parse_file_list_command(command_name, raw_args)

    try:
        args = shlex.split(raw_args)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if command_name == "start":
        return _parse_start(args)
    elif command_name == "stop":
        return _parse_no_args(args, "stop", StopCommand)
    elif command_name == "list":
        return _parse_no_args(args, "list", ListCommand)
    elif command_name == "peers":
        return _parse_no_args(args, "peers", PeersCommand)
    elif command_name == "files":
        return _parse_files(args)
    elif command_name == "download":
        return _parse_download(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_file_list_command(command_name: str, raw_args: str) -> CommandRequest:
    """Parse 'share file-list' / 'unshare file-list', keeping the list verbatim."""
    if not raw_args:
        raise ParseError(f"{command_name} requires a file list, e.g. {command_name} /path/a.txt, /path/b.txt")

    if command_name == "share":
        return ShareCommand(file_list=raw_args)
    return UnshareCommand(file_list=raw_args)


def _parse_start(args: list[str]) -> StartCommand:
    """Parse 'start <name>' command."""
    if len(args) != 1:
        raise ParseError("start requires exactly 1 argument: <name>")

    return StartCommand(name=args[0])


def _parse_no_args(args: list[str], name: str, command_type):
    if args:
        raise ParseError(f"{name} takes no arguments")
    return command_type()


def _parse_files(args: list[str]) -> FilesCommand:
    """Parse 'files <owner>' command."""
    if len(args) != 1:
        raise ParseError("files requires exactly 1 argument: <owner>")

    return FilesCommand(owner=args[0])


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <owner> <path> <save-path>' command."""
    if len(args) != 3:
        raise ParseError("download requires exactly 3 arguments: <owner> <path> <save-path>")

    owner, path, save_path = args
    return DownloadCommand(owner=owner, path=path, save_path=save_path)
