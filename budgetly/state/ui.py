"""UI slice: display preferences."""

from typing import get_args

from budgetly.state.types import ThemeMode


class UiSlice:
    """Actions for ``balance_visible`` and ``theme_mode``."""

    def toggle_balance_visibility(self) -> None:
        self.set(lambda state: {"balance_visible": not state.balance_visible})

    def set_theme_mode(self, mode: ThemeMode) -> None:
        if mode not in get_args(ThemeMode):
            raise ValueError(f"Unknown theme mode: {mode!r}")
        self.set({"theme_mode": mode})
