"""Static metadata describing QuizBoard."""

APP_NAME = "QuizBoard"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizBoard lets people author multiple-choice quizzes and lets other people take them. "
    "Quizzes are built question by question, validated before publishing, and scored on submit."
)

IMPORT_FORMAT_HELP = (
    "A quiz can be written in a plain .txt file and imported as a draft:\n\n"
    "TITLE: Angles\n"
    "DESCRIPTION: Degrees to radians\n\n"
    "Q: What is $30^o$ in radians?\n"
    "A: \\frac{\\pi}{2}\nB: \\frac{\\pi}{6}\nC: \\frac{\\pi}{4}\nD: \\frac{\\pi}{3}\n"
    "CORRECT: B\n\n"
    "Q: What is $45^o$ in radians?\n"
    "A: \\frac{\\pi}{3}\nB: \\frac{\\pi}{6}\nC: \\frac{\\pi}{4}\nD: \\frac{3\\pi}{4}\n"
    "CORRECT: C"
)
