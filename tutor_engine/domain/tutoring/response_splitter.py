import re
from typing import NamedTuple, Optional

from tutor_engine.core.prompts import STATE_UPDATE_DELIMITER

_FENCE_MARKER = re.compile(r"```(?:json|JSON)?")
_DANGLING_FENCE = re.compile(r"\n?```[a-zA-Z]*\s*$")


class SplitReply(NamedTuple):
    display_text: str
    delta_text: str

    @property
    def has_delta(self) -> bool:
        return bool(self.delta_text)


def strip_code_fences(text: Optional[str]) -> str:
    """Removes ```json / ``` markers a model may wrap around its JSON."""
    return _FENCE_MARKER.sub("", text or "").strip()


def split_response(raw_text: Optional[str], delimiter: str = STATE_UPDATE_DELIMITER) -> SplitReply:
    """
    Splits a model reply on the FIRST delimiter occurrence.

    Without a delimiter the whole reply is display text and the delta is empty,
    which the state parser reports as a ParseError.
    """
    text = raw_text or ""
    if delimiter not in text:
        return SplitReply(display_text=text.strip(), delta_text="")

    display, delta = text.split(delimiter, 1)
    display = display.rstrip()
    # An unbalanced fence right before the delimiter was opened for the JSON block.
    if display.count("```") % 2 == 1:
        display = _DANGLING_FENCE.sub("", display)
    return SplitReply(display_text=display.strip(), delta_text=strip_code_fences(delta))
