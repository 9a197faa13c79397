"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["register", "login", "logout", "upload", "list", "info", "download", "delete", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2AABEE bold",
        "command": "#0088ff bold",
    }
)

TELEGRAM_BLUE = "\033[38;2;42;171;238m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{TELEGRAM_BLUE}
   _____ _           _ __      __         _ _
  / ____| |         | |\\ \\    / /        | | |
 | |    | |__   __ _| |_\\ \\  / /_ _ _   _| | |_
 | |    | '_ \\ / _` | __|\\ \\/ / _` | | | | | __|
 | |____| | | | (_| | |_  \\  / (_| | |_| | | |_
  \\_____|_| |_|\\__,_|\\__|  \\/ \\__,_|\\__,_|_|\\__|
{RESET}"""

WELCOME_TITLE = "ChatVault CLI - files stored as chat documents"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "chatvault> "

HELP_TEXT = """Available commands:
  register <username> <password>           Register new user account
  login <username> <password>              Login and get API key
  logout                                   Revoke the stored API key
  upload <path> [--thumbnail <image>]      Upload a file (large files are chunked)
  list                                     List your transfers, most recent first
  info <transfer_id>                       Show a transfer's chunk manifest
  download <transfer_id> [output_path]     Download and reassemble a transfer
  delete <transfer_id>                     Delete a transfer record
  clear                                    Clear screen and redisplay welcome message
  help                                     Show this help
  exit                                     Exit REPL

Examples:
  register alice mypassword123
  upload backups/disk.img
  upload holiday.jpg --thumbnail holiday_small.jpg
  list
  download 3f2a9c1e-... restored.img
  delete 3f2a9c1e-..."""
