# maxq/parsers/render_output.py
"""Heuristic classification of 3dsmaxcmd console output.

The renderer has no machine-readable protocol, so completion and failure are
guessed from fixed phrases in its text. The process exit code stays the
authoritative signal when none of these phrases show up.
"""
import codecs
import re
import unicodedata
from typing import NamedTuple

STDOUT = "stdout"
STDERR = "stderr"

PROGRESS = "progress"
SUCCESS = "success"
FAILURE = "failure"

PLACEHOLDER = "�"

_ERROR_MARKER = re.compile(r"error", re.IGNORECASE)
_COMPLETION_MARKERS = re.compile(r"rendering completed|successfully rendered", re.IGNORECASE)
_KEEP_CONTROLS = {"\n", "\r", "\t"}


class OutputEvent(NamedTuple):
    kind: str
    text: str

    @property
    def is_terminal(self) -> bool:
        return self.kind != PROGRESS


def classify(chunk: str, channel: str) -> OutputEvent:
    if channel == STDERR and _ERROR_MARKER.search(chunk):
        return OutputEvent(FAILURE, chunk)
    if _COMPLETION_MARKERS.search(chunk):
        return OutputEvent(SUCCESS, chunk)
    return OutputEvent(PROGRESS, chunk)


def _is_safe(ch: str) -> bool:
    if ch in _KEEP_CONTROLS:
        return True
    # Letters, marks, numbers, punctuation, symbols and plain spaces
    return unicodedata.category(ch)[0] in "LMNPS" or ch == " "


def scrub_text(text: str) -> str:
    return "".join(ch if _is_safe(ch) else PLACEHOLDER for ch in text)


class OutputDecoder:
    """UTF-8 decoder for one output channel.

    Bytes of a character split across two reads are held back until the
    rest arrives; only genuinely undecodable bytes become ``PLACEHOLDER``.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: bytes, final: bool = False) -> str:
        return scrub_text(self._decoder.decode(data, final))
