"""Comment-stripping scanner for scripts sent with execute_script.

A data line cannot contain a line break, so a multi-line script has to be
flattened before it is sent. Flattening naively would turn a ``//`` comment
into a comment that swallows every following statement, so comments are
removed first. String literals are copied through untouched, which keeps a
``//`` inside ``"http://..."`` intact.

Template literals and regex literals are not recognized.
"""

import re
from collections.abc import Iterable
from enum import Enum

QUOTES = frozenset({'"', "'"})
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ScanState(Enum):
    """Scanner states."""

    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_BLOCK_COMMENT = "in_block_comment"


class ScriptSanitizer:
    """Finite-state scanner that strips ``//`` and ``/* */`` comments.

    Block-comment state carries over from one line to the next; string state
    does not, since a plain quote cannot span lines.
    """

    def __init__(self) -> None:
        self.inside_block_comment = False

    def scan_line(self, line: str) -> str:
        """Strip comments from one line, updating block-comment state.

        Args:
            line: A single source line without its line terminator

        Returns:
            The line's code with comments removed, trimmed
        """
        line = line.strip()
        result: list[str] = []
        state = ScanState.IN_BLOCK_COMMENT if self.inside_block_comment else ScanState.NORMAL
        quote = ""
        is_escape = False

        i = 0
        length = len(line)
        while i < length:
            char = line[i]
            next_char = line[i + 1] if i + 1 < length else ""

            if state is ScanState.IN_BLOCK_COMMENT:
                if char == "*" and next_char == "/":
                    state = ScanState.NORMAL
                    i += 1
            elif state is ScanState.IN_STRING:
                result.append(char)
                if char == "\\" and not is_escape:
                    is_escape = True
                elif char == quote and not is_escape:
                    state = ScanState.NORMAL
                else:
                    is_escape = False
            elif char in QUOTES:
                state = ScanState.IN_STRING
                quote = char
                is_escape = False
                result.append(char)
            elif char == "/" and next_char == "/":
                break
            elif char == "/" and next_char == "*":
                state = ScanState.IN_BLOCK_COMMENT
                i += 1
            else:
                result.append(char)
            i += 1

        self.inside_block_comment = state is ScanState.IN_BLOCK_COMMENT
        return "".join(result).strip()

    def scan(self, lines: Iterable[str]) -> list[str]:
        """Scan lines in order, dropping those left empty."""
        processed = (self.scan_line(line) for line in lines)
        return [line for line in processed if line]


def sanitize_script(script: str) -> str:
    """Flatten a script into a single comment-free line.

    Only CR and LF end a line; other separators such as U+2028 are ordinary
    characters, so they never cut a string literal short. Lines are joined
    with single spaces. A script made only of comments and
    whitespace yields an empty string.

    Example:
        >>> sanitize_script('console.log("//x"); // note\\nfoo();')
        'console.log("//x"); foo();'
    """
    return " ".join(ScriptSanitizer().scan(LINE_BREAK.split(script)))
