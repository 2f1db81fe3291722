"""Quiz-related constants shared across the session core, backend and UI."""

DEFAULT_TIME_LIMIT_MINUTES: int = 10
TIMER_INTERVAL_MS: int = 1000
TIME_LIMIT_WARNING_WINDOW_SECONDS: int = 30

STREAK_THRESHOLD_PERCENT: int = 70
LEADERBOARD_DEFAULT_LIMIT: int = 10
MAX_GENERATED_QUESTIONS: int = 50
DIFFICULTY_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")

SAMPLE_QUIZ_FILENAME: str = "sample_quizzes.txt"

MIN_OPTIONS_PER_QUESTION: int = 2
MAX_OPTIONS_PER_QUESTION: int = 6

PERFECT_STREAK_LENGTH: int = 5
EXPLORER_CATEGORY_COUNT: int = 3

SAMPLE_QUIZ_OWNER: str = "sample-user-1"
