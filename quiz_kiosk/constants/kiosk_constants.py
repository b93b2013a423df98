"""Quiz-related constants shared across UI and core layers."""

ADMIN_STATE_STORAGE_KEY: str = "quizkiosk-admin-state"
QUESTION_USAGE_STORAGE_KEY: str = "quizkiosk-question-usage"

DEFAULT_QUIZ_ID: str = "quiz-default"
DEFAULT_QUIZ_TITLE: str = "Students Quiz Competition"
DEFAULT_QUIZ_DESCRIPTION: str = "Answer 5 curated questions in under three minutes."
DEFAULT_SECONDS_PER_QUESTION: int = 36
DEFAULT_QUESTIONS_PER_ATTEMPT: int = 5

MIN_QUESTION_POOL_SIZE: int = 3
PHONE_DIGIT_COUNT: int = 10

TICK_INTERVAL_SECONDS: float = 1.0
ANSWER_FEEDBACK_DELAY_SECONDS: float = 1.5
RESULTS_DELAY_SECONDS: float = 1.5
TIMEOUT_RESULTS_DELAY_SECONDS: float = 0.0
TIMER_WARNING_THRESHOLD_SECONDS: int = 30
