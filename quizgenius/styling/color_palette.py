"""Light and dark colours for QuizGenius, grouped by the part of the quiz they paint."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()

    def toggled(self) -> Theme:
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


@dataclass(frozen=True)
class ThemeColors:
    """One colour role with a value per theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Colour roles used by the stylesheets and the HTML question views."""

    # Window chrome
    TEXT_PRIMARY = ThemeColors(light="#1A1A1A", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#666666", dark="#AAAAAA")
    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F7F5FB", dark="#2A2833")
    BORDER_PRIMARY = ThemeColors(light="#D4D0DC", dark="#4B4757")

    # Buttons; the primary colour marks Start / Submit and the checked mode button
    BUTTON_PRIMARY_BG = ThemeColors(light="#6D28D9", dark="#A78BFA")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#120A24")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F3F0F9", dark="#37334A")
    BUTTON_HOVER_BG = ThemeColors(light="#E6E0F3", dark="#4A4560")

    # Quiz progress and countdown
    PROGRESS_FILL = ThemeColors(light="#6D28D9", dark="#A78BFA")
    TIMER_NORMAL = ThemeColors(light="#4C1D95", dark="#C4B5FD")
    TIMER_WARNING = ThemeColors(light="#D13438", dark="#FF6B6B")

    # Result review
    ANSWER_CORRECT = ThemeColors(light="#107C10", dark="#6FCF6F")
    ANSWER_INCORRECT = ThemeColors(light="#B91C1C", dark="#F87171")

    # Code snippets inside the question view
    CODE_BG = ThemeColors(light="#F3F4F6", dark="#111827")
