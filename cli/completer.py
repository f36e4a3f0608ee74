"""Custom completer for chunkweave CLI with JSON file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, SUPPORTED_FILE_EXTENSIONS


class ChunkweaveCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - JSON file completion for the first argument of 'upload'
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        arg_position = len(tokens) if is_typing_new_token else len(tokens) - 1
        if arg_position != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_json_files(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_json_files(self, partial: str) -> Iterable[Completion]:
        """
        Complete JSON file paths relative to the working directory.

        Directories are offered with a trailing slash so nested files can be reached.
        """
        base = Path(partial)
        if partial.endswith("/"):
            directory, prefix = base, ""
        else:
            directory, prefix = base.parent, base.name

        search_dir = Path.cwd() / directory
        if not search_dir.is_dir():
            return

        candidates = []
        for item in search_dir.iterdir():
            if not item.name.lower().startswith(prefix.lower()):
                continue
            rel_path = str(directory / item.name) if str(directory) != "." else item.name
            if item.is_dir():
                candidates.append(rel_path + "/")
            elif item.name.lower().endswith(SUPPORTED_FILE_EXTENSIONS):
                candidates.append(rel_path)

        for candidate in sorted(candidates):
            yield Completion(candidate, start_position=-len(partial))
