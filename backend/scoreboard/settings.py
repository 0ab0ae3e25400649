"""Scoreboard process configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ScoreboardSettings(BaseSettings):
    model_config = {"env_prefix": "SCOREBOARD_"}

    state_path: str = Field(default="backend/data/scoreboard.json", min_length=1)
    log_dir: str | None = Field(default="backend/logs/scoreboard", min_length=1)
    # Save the session document after every applied command.
    autosave: bool = True
