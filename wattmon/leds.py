"""Status LED blink patterns shown one colour per half-second step."""

from __future__ import annotations

MAX_PATTERN = 12
RED = "R"
GREEN = "G"


class LedCycle:
    """Steps repeatedly through a pattern of red, green and dark half-seconds.

    Each character of the pattern is one step: ``R`` lights the red LED,
    ``G`` the green one and any other character leaves both dark. Only the
    first twelve characters are used.
    """

    def __init__(self, pattern: str):
        if not isinstance(pattern, str):
            raise TypeError("pattern must be a string")
        self.pattern = pattern.split("\0", 1)[0][:MAX_PATTERN]
        self.position = 0

    def tick(self) -> str:
        """Advance one step and return the colour now lit, or "" for dark."""
        if self.position >= len(self.pattern):
            self.position = 0
        if not self.pattern:
            return ""
        color = self.pattern[self.position]
        self.position += 1
        return color if color in (RED, GREEN) else ""

    @property
    def red(self) -> bool:
        """Whether the step last shown lit the red LED."""
        return self._last() == RED

    @property
    def green(self) -> bool:
        """Whether the step last shown lit the green LED."""
        return self._last() == GREEN

    def _last(self) -> str:
        if not self.pattern or self.position == 0:
            return ""
        return self.pattern[self.position - 1]