"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizGenius"
DEFAULT_USER_ID: str = "local-user"

MODE_BUTTON_BROWSE: str = "Quizzes"
MODE_BUTTON_REFRESH: str = "Refresh"
MODE_BUTTON_THEME: str = "Toggle Theme"

BROWSE_OPEN_BUTTON: str = "Open Quiz"
BROWSE_DELETE_BUTTON: str = "Delete Quiz"
BROWSE_GENERATE_BUTTON: str = "Generate Quiz"
BROWSE_EMPTY_STATE: str = "No quizzes available yet."

QUIZ_START_BUTTON: str = "Start Quiz"
QUIZ_PREV_BUTTON: str = "Previous"
QUIZ_NEXT_BUTTON: str = "Next"
QUIZ_SUBMIT_BUTTON: str = "Submit Quiz"
QUIZ_EXIT_BUTTON: str = "Exit Quiz"

RESULTS_BACK_BUTTON: str = "Back to Quizzes"
LEADERBOARD_SIZE: int = 5

NO_QUESTIONS_TITLE: str = "Loading Questions"
NO_QUESTIONS_MESSAGE: str = "Please wait while we prepare your quiz..."
NO_QUIZ_SELECTED_MESSAGE: str = "Please select a quiz first."
QUIZ_NOT_FOUND_MESSAGE: str = (
    "Sorry, we couldn't find the quiz you're looking for. It may have been deleted or moved."
)

MODE_BUTTON_CREATE: str = "Create"
BROWSE_EDIT_BUTTON: str = "Edit Quiz"

CREATE_NEW_QUIZ_BUTTON: str = "New Quiz"
CREATE_SAVE_DETAILS_BUTTON: str = "Save Details"
CREATE_INSERT_BUTTON: str = "New Question"
CREATE_SAVE_BUTTON: str = "Save Question"
CREATE_DELETE_BUTTON: str = "Delete Question"
CREATE_PREV_BUTTON: str = "Previous"
CREATE_NEXT_BUTTON: str = "Next"
PLACEHOLDER_QUESTION: str = "Type the question in Markdown, e.g. **What** does this print?"
PLACEHOLDER_CODE: str = "Optional code snippet shown under the question"
