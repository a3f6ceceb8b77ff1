"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

from common.constants import UPLOAD_LIMIT_HINT

COMMANDS = [
    "register", "login", "logout", "whoami", "list", "upload", "delete",
    "share", "open", "download", "clear", "exit", "help",
]

FILE_ID_COMMANDS = ("delete", "share", "open", "download")

STYLE = Style.from_dict(
    {
        "prompt": "#7C6DFA bold",
        "command": "#0088ff bold",
    }
)

ACCENT = "\033[38;2;124;109;250m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{ACCENT}
 ███████╗██╗██╗     ███████╗██╗   ██╗ █████╗ ██╗   ██╗██╗  ████████╗
 ██╔════╝██║██║     ██╔════╝██║   ██║██╔══██╗██║   ██║██║  ╚══██╔══╝
 █████╗  ██║██║     █████╗  ██║   ██║███████║██║   ██║██║     ██║
 ██╔══╝  ██║██║     ██╔══╝  ╚██╗ ██╔╝██╔══██║██║   ██║██║     ██║
 ██║     ██║███████╗███████╗ ╚████╔╝ ██║  ██║╚██████╔╝███████╗██║
 ╚═╝     ╚═╝╚══════╝╚══════╝  ╚═══╝  ╚═╝  ╚═╝ ╚═════╝ ╚══════╝╚═╝
{RESET}"""

WELCOME_TITLE = "FileVault CLI - upload, list and share files"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "filevault> "

DELETE_CONFIRMATION = "Delete {label}? This cannot be undone. [y/N] "

HELP_TEXT = f"""Available commands:
  register <name> <email> <password>   Create an account and log in
  login <email> <password>             Log in
  logout                               Log out
  whoami                               Show the logged-in user
  list                                 List your files
  upload <path>                        Upload one file ({UPLOAD_LIMIT_HINT})
  delete <file_id>                     Delete a file (asks for confirmation)
  share <file_id>                      Print the public share link of a file
  open <share_link|file_id>            Show a shared file (no login needed)
  download <share_link|file_id> [out]  Download a shared file (no login needed)
  clear                                Clear screen and redisplay welcome message
  help                                 Show this help
  exit                                 Exit REPL

Examples:
  register "Ada Lovelace" ada@example.com s3cret-pass
  upload ~/notes/report.pdf
  share 65f1c0a2000e4b1d2c3a
  open https://files.example.com/share/65f1c0a2000e4b1d2c3a
  download 65f1c0a2000e4b1d2c3a downloads/report.pdf"""
