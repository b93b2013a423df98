"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizKiosk"

REGISTRATION_HEADLINE: str = "Students Quiz Competition"
REGISTRATION_SUBTITLE: str = "Register to compete before the timer starts"
REGISTRATION_BEGIN_BUTTON: str = "Begin Quiz"
REGISTRATION_NAME_PLACEHOLDER: str = "Your name"
REGISTRATION_PHONE_PLACEHOLDER: str = "Phone number"
REGISTRATION_CLASS_PLACEHOLDER: str = "Class or section"
REGISTRATION_SUMMARY_TEMPLATE: str = "{title}\n{question_count} questions · {minutes} minutes"
REGISTRATION_TIMER_NOTICE: str = (
    "Timer starts as soon as you begin. Submissions close automatically when time runs out."
)

QUIZ_UNAVAILABLE_TITLE: str = "Quiz unavailable"
QUIZ_UNAVAILABLE_MESSAGE: str = (
    "The administrator has not published a quiz yet. Please check back later."
)
QUIZ_NOT_STARTED_MESSAGE: str = "The quiz could not be started. Please contact your administrator."

ATTEMPT_PROGRESS_TEMPLATE: str = "Question {current} of {total}"
ATTEMPT_FOCUS_NOTICE: str = "Stay focused - results appear at the end"

RESULTS_RETAKE_BUTTON: str = "Take Quiz Again"
RESULTS_FINISH_BUTTON: str = "Finish"
RESULTS_STATUS_LABELS: dict[str, str] = {
    "completed": "Completed",
    "timeout": "Time ran out",
    "incomplete": "Incomplete",
}
