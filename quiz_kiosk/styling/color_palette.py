"""Color palette for the kiosk window in light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the kiosk."""

    TEXT_PRIMARY = ThemeColors(light="#0F172A", dark="#F5F7FF")
    TEXT_SECONDARY = ThemeColors(light="#475569", dark="#94A3B8")

    BACKGROUND_PRIMARY = ThemeColors(light="#F8FAFC", dark="#0B1120")
    BACKGROUND_CARD = ThemeColors(light="#FFFFFF", dark="#111A30")

    BORDER_PRIMARY = ThemeColors(light="#CBD5E1", dark="#334155")
    BORDER_FOCUS = ThemeColors(light="#1F9AA5", dark="#2DD4BF")

    BUTTON_PRIMARY_BG = ThemeColors(light="#1F9AA5", dark="#1F9AA5")
    BUTTON_PRIMARY_HOVER = ThemeColors(light="#16808A", dark="#16808A")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#FFFFFF")
    OPTION_BG = ThemeColors(light="#E2E8F0", dark="#1E293B")

    # Answer feedback and timer states
    CORRECT = ThemeColors(light="#15803D", dark="#4ADE80")
    INCORRECT = ThemeColors(light="#B91C1C", dark="#F87171")
    TIMER_NORMAL = ThemeColors(light="#0F172A", dark="#FACC15")
    TIMER_WARNING = ThemeColors(light="#B91C1C", dark="#F87171")
