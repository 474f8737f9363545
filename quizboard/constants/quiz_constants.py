"""Quiz-related constants shared across core and server layers."""

OPTIONS_PER_QUESTION: int = 4
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
DEFAULT_LEADERBOARD_LIMIT: int = 10
ANONYMOUS_DISPLAY_NAME: str = "Anonymous"
UNKNOWN_QUIZ_TITLE: str = "Unknown Quiz"
