"""Custom completer for FileVault CLI."""

from typing import Iterable

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, FILE_ID_COMMANDS
from vault.state import AppState


class FileVaultCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local path completion for the 'upload' command
    - File id completion from the last listing for delete/share/open/download
    """

    def __init__(self, state: AppState):
        self.state = state
        self.paths = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]
        argument_index = len(tokens) - 1 if not is_typing_new_token else len(tokens)
        if argument_index != 1:
            return

        if command == "upload":
            path_document = Document(current_word, len(current_word))
            yield from self.paths.get_completions(path_document, complete_event)
        elif command in FILE_ID_COMMANDS:
            yield from self._complete_file_ids(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_file_ids(self, partial: str) -> Iterable[Completion]:
        """Complete ids of the files in the cached listing, showing their names."""
        for record in self.state.records:
            if record.file_id.startswith(partial):
                yield Completion(
                    record.file_id,
                    start_position=-len(partial),
                    display_meta=record.name,
                )
