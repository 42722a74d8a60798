"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["start", "stop", "share", "unshare", "list", "files", "peers", "download", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2E9E6B bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;158;107m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
 ┌─┐┌─┐┌─┐┌─┐┬ ┬┌─┐┬─┐┌─┐
 ├─┘┌─┘├─┘└─┐├─┤├─┤├┬┘├┤
 ┴  └─┘┴  └─┘┴ ┴┴ ┴┴└─└─┘
{RESET}"""

WELCOME_TITLE = "p2pshare - peer-to-peer file sharing"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "p2pshare> "

HELP_TEXT = """Available commands:
  start <name>                        Start your peer listener and join the tracker as <name>
  stop                                Stop your peer listener and leave the tracker
  share <file-list>                   Share files (absolute paths separated by ", ")
  unshare <file-list>                 Stop sharing files
  list                                List every shared file on the tracker
  files <owner>                       List files shared by <owner>
  peers                               List known peers and their addresses
  download <owner> <path> <save-path> Download <path> from <owner> into <save-path>
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL (stops your peer)

Examples:
  start alice
  share /home/alice/notes.txt, /home/alice/photo.png
  files alice
  download alice /home/alice/notes.txt /tmp/notes.txt
  unshare /home/alice/photo.png"""
