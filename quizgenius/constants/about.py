"""Static metadata describing QuizGenius."""

APP_NAME = "QuizGenius"
APP_VERSION = "0.2"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizGenius is a desktop quiz client backed by a small REST service. "
    "Browse or generate quizzes, take them against the clock, and review your results, "
    "leaderboard position and achievements."
)

HELP_TEXT = (
    "Pick a quiz from the list and press Start Quiz, or use Create to write your own.\n"
    "While the timer is running you can use:\n\n"
    "Left / P: previous question\n"
    "Right / N: next question\n"
    "Home / End: first / last question\n"
    "1-4: select an answer\n"
    "S: submit (on the last question)\n\n"
    "The quiz is submitted automatically when the timer reaches zero."
)
