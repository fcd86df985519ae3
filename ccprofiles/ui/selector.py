"""
Profile selector state machine.

The selector knows nothing about terminals: it is fed key names and reports
whether a profile was chosen or the selection was cancelled. The CLI drives it
from line input; a richer front end could drive it from raw key presses.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


UP_KEYS = {"up", "k"}
DOWN_KEYS = {"down", "j"}
SELECT_KEYS = {"enter", ""}
CANCEL_KEYS = {"escape", "esc", "q", "ctrl-c"}


@dataclass
class SelectorState:
    index: int
    done: bool = False
    cancelled: bool = False


class ProfileSelector:
    """
    Arrow-key style chooser over an ordered list of profile names.

    The cursor wraps at both ends. A key that is a profile name or a 1-based
    number jumps straight to that entry and selects it.
    """

    def __init__(self, names: Sequence[str], selected: Optional[int] = None):
        if not names:
            raise ValueError("Cannot select from an empty list of profiles")
        self.names: List[str] = list(names)
        start = selected if selected is not None and 0 <= selected < len(self.names) else 0
        self.state = SelectorState(index=start)

    @classmethod
    def for_current(cls, names: Sequence[str], current: Optional[str]) -> 'ProfileSelector':
        names = list(names)
        index = names.index(current) if current in names else None
        return cls(names, index)

    @property
    def highlighted(self) -> str:
        return self.names[self.state.index]

    @property
    def finished(self) -> bool:
        return self.state.done

    def press(self, key: str) -> SelectorState:
        """Apply one key to the state. Keys after the selection finished are ignored."""
        if self.state.done:
            return self.state

        # blank input (a bare newline) means enter
        key = key.strip()
        lowered = key.lower()
        count = len(self.names)

        if lowered in UP_KEYS:
            self.state.index = (self.state.index - 1) % count
        elif lowered in DOWN_KEYS:
            self.state.index = (self.state.index + 1) % count
        elif lowered == "home":
            self.state.index = 0
        elif lowered == "end":
            self.state.index = count - 1
        elif lowered in SELECT_KEYS:
            self.state.done = True
        elif lowered in CANCEL_KEYS:
            self.state.done = True
            self.state.cancelled = True
        elif key in self.names:
            self.state.index = self.names.index(key)
            self.state.done = True
        elif key.isdigit() and 1 <= int(key) <= count:
            self.state.index = int(key) - 1
            self.state.done = True
        return self.state

    def result(self) -> Optional[str]:
        """Selected name, or None if cancelled or not finished."""
        if not self.state.done or self.state.cancelled:
            return None
        return self.highlighted


def select_profile(names: Sequence[str], keys: Iterable[str], selected: Optional[int] = None) -> Optional[str]:
    """
    Run the selector over a sequence of keys.

    Args:
        names: Ordered profile names
        keys: Key names, consumed until the selection finishes
        selected: Index highlighted initially

    Returns:
        The chosen name, or None if cancelled or the keys ran out first
    """
    selector = ProfileSelector(names, selected)
    for key in keys:
        selector.press(key)
        if selector.finished:
            break
    return selector.result()
