"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "list", "download", "delete", "tag", "tags", "backup", "restore", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2E9E6B bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;158;107m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
 ████████╗ █████╗  ██████╗ ██╗   ██╗ █████╗ ██╗   ██╗██╗  ████████╗
 ╚══██╔══╝██╔══██╗██╔════╝ ██║   ██║██╔══██╗██║   ██║██║  ╚══██╔══╝
    ██║   ███████║██║  ███╗██║   ██║███████║██║   ██║██║     ██║
    ██║   ██╔══██║██║   ██║╚██╗ ██╔╝██╔══██║██║   ██║██║     ██║
    ██║   ██║  ██║╚██████╔╝ ╚████╔╝ ██║  ██║╚██████╔╝███████╗██║
    ╚═╝   ╚═╝  ╚═╝ ╚═════╝   ╚═══╝  ╚═╝  ╚═╝ ╚═════╝ ╚══════╝╚═╝
{RESET}"""

WELCOME_TITLE = "Tagvault CLI - Tagged File Storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "tagvault> "

HELP_TEXT = """Available commands:
  upload <path> [tag ...]             Upload a file with optional tags
  list [tag]                          List files, newest first (optionally only those with a tag)
  download <id> [output_path]         Download a file by ID
  delete <id>                         Delete a file by ID
  tag <id> <tag ...>                  Replace a file's tags
  tags                                List all tags in use
  backup [output.zip]                 Download a backup archive of everything
  restore <archive.zip>               Restore a backup archive into the server
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  upload ./notes/todo.txt work draft
  list work
  tag 3f2a9c1e-... work final
  backup backups/today.zip
  restore backups/today.zip"""
