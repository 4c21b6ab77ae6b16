#!/usr/bin/env python3
"""
Lightweight code completion for the code buffer.

No fuzzy scoring: keywords first, then names the kid has assigned, filtered
by prefix and capped at MAX_SUGGESTIONS.
"""

import re
from typing import Iterable, List, Tuple

from prompt_toolkit.completion import Completer, Completion


MAX_SUGGESTIONS = 5

STATIC_KEYWORDS = [
    'import', 'pygame', 'sys', 'def', 'class', 'return', 'if', 'else', 'elif',
    'while', 'for', 'in', 'print', 'True', 'False', 'None', 'and', 'or', 'not',
    'screen', 'display', 'set_mode', 'flip', 'update', 'caption',
    'draw', 'circle', 'rect', 'line', 'fill', 'blit',
    'event', 'quit', 'get', 'type', 'key', 'main', 'init', 'time', 'Clock', 'tick',
]

_TRAILING_IDENTIFIER = re.compile(r'([A-Za-z_][A-Za-z0-9_]*)$')
_ASSIGNMENT = re.compile(r'([A-Za-z_][A-Za-z0-9_]*)\s*=')


def current_prefix(buffer: str, caret: int) -> str:
    """The identifier fragment that ends at the caret, or ''"""
    match = _TRAILING_IDENTIFIER.search(buffer[:caret])
    return match.group(1) if match else ''


def candidate_pool(buffer: str) -> List[str]:
    """Keywords followed by assigned names, in first-seen order"""
    pool = list(STATIC_KEYWORDS)
    seen = set(pool)
    for name in _ASSIGNMENT.findall(buffer):
        if name not in seen:
            seen.add(name)
            pool.append(name)
    return pool


def suggest(buffer: str, caret: int) -> List[str]:
    """Up to MAX_SUGGESTIONS completions for the word ending at the caret"""
    prefix = current_prefix(buffer, caret)
    if not prefix:
        return []

    matches = [
        word for word in candidate_pool(buffer)
        if word.startswith(prefix) and word != prefix
    ]
    return matches[:MAX_SUGGESTIONS]


def accept(buffer: str, caret: int, candidate: str) -> Tuple[str, int]:
    """Replace the prefix before the caret with the candidate.

    Returns the new buffer and the caret position right after the insertion.
    """
    prefix = current_prefix(buffer, caret)
    start = caret - len(prefix)
    new_buffer = buffer[:start] + candidate + buffer[caret:]
    return new_buffer, start + len(candidate)


class CodeAssistCompleter(Completer):
    """prompt_toolkit adapter for the REPL code editor"""

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        prefix = current_prefix(document.text, document.cursor_position)
        for word in suggest(document.text, document.cursor_position):
            yield Completion(word, start_position=-len(prefix))
