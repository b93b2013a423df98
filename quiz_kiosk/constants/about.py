"""Static metadata describing QuizKiosk."""

APP_NAME = "QuizKiosk"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizKiosk runs a timed multiple-choice quiz for walk-up participants. "
    "Each participant gets a personalized question set that avoids repeats until the catalog is exhausted. "
    "Administrators manage participants, quizzes, and results through the local admin API."
)

HELP_TEXT = (
    "Enter your full name, a 10 digit phone number, and your class or section, then press Begin Quiz.\n\n"
    "The timer starts as soon as the first question appears. Pick one option per question; "
    "the quiz moves on automatically after showing whether you were right. "
    "When the timer reaches zero your answers so far are submitted automatically."
)
