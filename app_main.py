"""Application entry point for the QuizBoard API."""

from __future__ import annotations

from quizboard.config import Config
from quizboard.core.quiz_manager import QuizManager
from quizboard.core.services.memory_gateway import InMemoryGateway
from quizboard.server.api_server import run_api_server
from quizboard.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, wire the quiz manager to a store, and serve the API."""
    settings = Config.from_env()
    logger = configure_logging(settings.server.log_level)
    logger.info("Starting QuizBoard…")

    quiz_manager = QuizManager(
        InMemoryGateway(),
        leaderboard_limit=settings.quiz.leaderboard_limit,
        public_by_default=settings.quiz.publish_public_by_default,
    )
    logger.info("API available at http://%s:%d/", settings.server.host, settings.server.port)
    run_api_server(
        quiz_manager,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
    )


if __name__ == "__main__":
    main()
