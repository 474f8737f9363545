"""
QuizBoard configuration

Server and quiz behavior settings. Environment variables override the
defaults from ``quizboard.constants`` so deployments can tune them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from quizboard.constants.network_constants import DEFAULT_HOST, DEFAULT_LOG_LEVEL, DEFAULT_PORT
from quizboard.constants.quiz_constants import DEFAULT_LEADERBOARD_LIMIT


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """Where the HTTP adapter listens"""
    host: str = field(default_factory=lambda: os.getenv("QUIZBOARD_HOST", DEFAULT_HOST))
    port: int = field(default_factory=lambda: int(os.getenv("QUIZBOARD_PORT", str(DEFAULT_PORT))))
    log_level: str = field(
        default_factory=lambda: os.getenv("QUIZBOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    )


@dataclass
class QuizConfig:
    """Publishing and ranking behavior"""
    leaderboard_limit: int = field(
        default_factory=lambda: int(
            os.getenv("QUIZBOARD_LEADERBOARD_LIMIT", str(DEFAULT_LEADERBOARD_LIMIT))
        )
    )
    publish_public_by_default: bool = field(
        default_factory=lambda: _env_flag("QUIZBOARD_PUBLIC_BY_DEFAULT", True)
    )


@dataclass
class Config:
    """Master config, built once at startup"""
    server: ServerConfig = field(default_factory=ServerConfig)
    quiz: QuizConfig = field(default_factory=QuizConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Re-read every section from the current environment."""
        return cls()
