"""Qt stylesheets for the kiosk panels."""

from .color_palette import ColorPalette, Theme


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.DARK) -> str:
        return f"""
            QMainWindow, QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 16px;
            }}
            QLineEdit {{
                background-color: {ColorPalette.BACKGROUND_CARD.get(theme)};
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                padding: 8px;
            }}
            QLineEdit:focus {{
                border: 1px solid {ColorPalette.BORDER_FOCUS.get(theme)};
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_PRIMARY_BG.get(theme)};
                color: {ColorPalette.BUTTON_PRIMARY_TEXT.get(theme)};
                border: none;
                border-radius: 8px;
                padding: 10px 18px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_PRIMARY_HOVER.get(theme)};
            }}
            QPushButton:disabled {{
                background-color: {ColorPalette.BORDER_PRIMARY.get(theme)};
            }}
            QTextBrowser {{
                background-color: {ColorPalette.BACKGROUND_CARD.get(theme)};
                border: none;
                border-radius: 8px;
            }}
        """

    @staticmethod
    def get_option_button_style(theme: Theme = Theme.DARK, feedback: bool | None = None) -> str:
        """Option button style; ``feedback`` colors the chosen option after answering."""
        if feedback is None:
            background = ColorPalette.OPTION_BG.get(theme)
        elif feedback:
            background = ColorPalette.CORRECT.get(theme)
        else:
            background = ColorPalette.INCORRECT.get(theme)
        return (
            f"QPushButton {{ background-color: {background}; "
            f"color: {ColorPalette.TEXT_PRIMARY.get(theme)}; text-align: left; "
            "padding: 14px; border-radius: 8px; }"
        )

    @staticmethod
    def get_timer_style(theme: Theme = Theme.DARK, warning: bool = False) -> str:
        color = ColorPalette.TIMER_WARNING if warning else ColorPalette.TIMER_NORMAL
        return f"font-size: 20pt; font-weight: bold; color: {color.get(theme)};"

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 22pt; font-weight: bold;"
