"""
Lexical classifier: is a textual match real code, or inside a literal/comment?

Line-oriented and deliberately approximate. Raw strings are entered on
``r"`` / ``r#"`` but the number of ``#`` delimiters is not tracked; the next
``"`` closes them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LexState(Enum):
    """Scanner state at a character position."""
    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_RAW_STRING = "in_raw_string"


class LexicalContext(Enum):
    """Where a text position lives."""
    CODE = "code"
    STRING = "string"
    COMMENT = "comment"


@dataclass(frozen=True)
class LineLexing:
    """Per-character states of one line plus the offset of a real ``//``."""

    states: tuple[LexState, ...]
    comment_start: Optional[int]

    def context_at(self, offset: int) -> LexicalContext:
        if self.comment_start is not None and offset >= self.comment_start:
            return LexicalContext.COMMENT
        if offset < len(self.states) and self.states[offset] is not LexState.NORMAL:
            return LexicalContext.STRING
        return LexicalContext.CODE


class LexicalClassifier:
    """Small state machine over a single line. No top-level functions."""

    @staticmethod
    def lex(line: str) -> LineLexing:
        """Walk the line once and record the state of every character."""
        states = [LexState.NORMAL] * len(line)
        state = LexState.NORMAL
        escaped = False
        comment_start: Optional[int] = None
        i = 0
        while i < len(line):
            ch = line[i]
            if state is LexState.IN_STRING:
                states[i] = state
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    state = LexState.NORMAL
                i += 1
                continue
            if state is LexState.IN_RAW_STRING:
                states[i] = state
                if ch == '"':
                    state = LexState.NORMAL
                i += 1
                continue

            if line.startswith("//", i):
                comment_start = i
                break
            opener = LexicalClassifier._raw_opener_length(line, i)
            if opener:
                for j in range(i, i + opener):
                    states[j] = LexState.IN_RAW_STRING
                state = LexState.IN_RAW_STRING
                i += opener
                continue
            if ch == '"':
                states[i] = LexState.IN_STRING
                state = LexState.IN_STRING
                i += 1
                continue
            char_len = LexicalClassifier._char_literal_length(line, i)
            if char_len:
                for j in range(i, i + char_len):
                    states[j] = LexState.IN_STRING
                i += char_len
                continue
            i += 1
        return LineLexing(states=tuple(states), comment_start=comment_start)

    @staticmethod
    def is_in_string_or_comment(line: str, pattern: str) -> bool:
        """
        True only if every occurrence of ``pattern`` is inside a literal or a comment.

        No occurrence at all is a non-match and returns False.
        """
        if not pattern:
            return False
        offsets = LexicalClassifier.occurrences(line, pattern)
        if not offsets:
            return False
        lexing = LexicalClassifier.lex(line)
        for offset in offsets:
            if lexing.context_at(offset) is LexicalContext.CODE:
                return False
        return True

    @staticmethod
    def classify_offset(line: str, offset: int) -> LexicalContext:
        """Classify a single position of a line."""
        return LexicalClassifier.lex(line).context_at(offset)

    @staticmethod
    def occurrences(line: str, pattern: str) -> list[int]:
        """All start offsets of ``pattern`` in ``line`` (overlaps included)."""
        found: list[int] = []
        start = line.find(pattern)
        while start != -1:
            found.append(start)
            start = line.find(pattern, start + 1)
        return found

    @staticmethod
    def code_only(line: str) -> str:
        """Blank literal contents and drop the trailing comment; offsets are preserved."""
        lexing = LexicalClassifier.lex(line)
        end = len(line) if lexing.comment_start is None else lexing.comment_start
        return "".join(
            ch if lexing.states[i] is LexState.NORMAL else " "
            for i, ch in enumerate(line[:end])
        )

    @staticmethod
    def _raw_opener_length(line: str, i: int) -> int:
        """Length of a ``r"`` / ``r#..#"`` / ``br"`` opener starting at ``i``, else 0."""
        if line[i] != "r":
            return 0
        prev = line[i - 1] if i > 0 else ""
        if prev == "b":
            prev = line[i - 2] if i > 1 else ""
        if prev and (prev.isalnum() or prev == "_"):
            return 0
        j = i + 1
        while j < len(line) and line[j] == "#":
            j += 1
        if j < len(line) and line[j] == '"':
            return j - i + 1
        return 0

    @staticmethod
    def _char_literal_length(line: str, i: int) -> int:
        """Length of a character literal at ``i`` ('x', '\\n', '\\u{1F600}'), else 0."""
        if line[i] != "'" or i + 2 >= len(line):
            return 0
        if line[i + 1] != "\\":
            return 3 if line[i + 2] == "'" else 0
        close = line.find("'", i + 3, i + 12)
        return close - i + 1 if close != -1 else 0
