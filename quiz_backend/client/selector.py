"""
Single-select group state (radio group semantics).

Keeps the selected value, the roving tab stop and, once an answer is known,
the correct/incorrect presentation state of each option.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

NEXT_KEYS = ("ArrowRight", "ArrowDown")
PREV_KEYS = ("ArrowLeft", "ArrowUp")


@dataclass(frozen=True)
class SelectorOption:
    value: Any
    label: str
    description: Optional[str] = None
    disabled: bool = False


@dataclass(frozen=True)
class OptionState:
    value: Any
    label: str
    checked: bool
    tabindex: int
    state: Optional[str]  # "correct", "incorrect" or None
    disabled: bool = False


class SelectorGroup:
    def __init__(
        self,
        options: Iterable[SelectorOption],
        value: Any = None,
        correct_value: Any = None,
        disabled: bool = False,
    ):
        self.options: List[SelectorOption] = list(options)
        self.value = value
        self.correct_value = correct_value
        self.disabled = disabled

    def _enabled_indexes(self) -> List[int]:
        if self.disabled:
            return []
        return [i for i, o in enumerate(self.options) if not o.disabled]

    def _index_of(self, value: Any) -> Optional[int]:
        for i, o in enumerate(self.options):
            if o.value == value:
                return i
        return None

    def select(self, value: Any) -> bool:
        index = self._index_of(value)
        if index is None or index not in self._enabled_indexes():
            return False
        self.value = value
        return True

    def _presentation_state(self, option: SelectorOption) -> Optional[str]:
        # Nothing is marked before a selection exists
        if self.value is None or self.correct_value is None:
            return None
        if option.value == self.correct_value:
            return "correct"
        if option.value == self.value:
            return "incorrect"
        return None

    def option_states(self) -> List[OptionState]:
        enabled = self._enabled_indexes()
        checked_index = self._index_of(self.value)
        if checked_index is not None and checked_index in enabled:
            tab_stop = checked_index
        else:
            tab_stop = enabled[0] if enabled else None

        return [
            OptionState(
                value=o.value,
                label=o.label,
                checked=o.value == self.value,
                tabindex=0 if i == tab_stop else -1,
                state=self._presentation_state(o),
                disabled=self.disabled or o.disabled,
            )
            for i, o in enumerate(self.options)
        ]

    def handle_key(self, key: str) -> bool:
        enabled = self._enabled_indexes()
        if not enabled:
            return False

        current = self._index_of(self.value)
        position = enabled.index(current) if current in enabled else None

        if key in NEXT_KEYS:
            target = 0 if position is None else (position + 1) % len(enabled)
        elif key in PREV_KEYS:
            target = len(enabled) - 1 if position is None else (position - 1) % len(enabled)
        elif key == "Home":
            target = 0
        elif key == "End":
            target = len(enabled) - 1
        else:
            return False

        self.value = self.options[enabled[target]].value
        return True
