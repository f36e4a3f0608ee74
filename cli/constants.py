"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "download", "inspect", "progress", "author", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#C8823C bold",
        "command": "#0088ff bold",
    }
)

CLAY = "\033[38;2;200;130;60m"
GREEN = "\033[92m"
RESET = "\033[0m"

LOGO = f"""{CLAY}
  ┌─┐┬ ┬┬ ┬┌┐┌┬┌─┬ ┬┌─┐┌─┐┬  ┬┌─┐
  │  ├─┤│ │││││├┴┐│││├┤ ├─┤└┐┌┘├┤
  └─┘┴ ┴└─┘┘└┘┴ ┴└┴┘└─┘┴ ┴ └┘ └─┘
{RESET}"""

WELCOME_TITLE = "chunkweave - chunked JSON documents on immutable storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "chunkweave> "

HELP_TEXT = """Available commands:
  upload <file.json> <project-id> <project-name> [folder] [root-tx]
                                      Store a JSON document (chunked when large, resumable)
  download <tx-id> [output_path]      Load a document or manifest and write it as JSON
  inspect <chunk-set-id>              List the chunks the tag index knows for a chunk set
  progress <project-id>               Show the local resume checkpoint for a project
  author <address>                    Set the address used for the Author tag
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  author 0x1f9840a85d5af5bf1d1762f925bdaddc4201f984
  upload scene.json proj-42 "My Scene"
  upload scene.json proj-42 "My Scene" sculptures 3kM9...root
  download 7Hq2...manifest downloads/scene.json
  inspect 68ae44eb-5857-48d7-b338-a9fdf9feb9f5
  progress proj-42"""

SUPPORTED_FILE_EXTENSIONS = (".json",)
