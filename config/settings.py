"""Configuration settings and data models."""

import json
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "tournament_config.json"


class TournamentConfig(BaseModel):
    """Rules and limits of the advancement engine."""

    database_path: str = Field(
        default="tournaments.db", description="SQLite database file for tournament state"
    )
    valid_sizes: List[int] = Field(
        default=[4, 8, 16, 32, 64], description="Allowed max_participants values"
    )
    elimination_fraction: float = Field(
        default=0.25, description="Share of a King of the Hill field eliminated per round"
    )
    judges_per_round: int = Field(
        default=3, description="Judges drawn to score a King of the Hill group round"
    )
    match_debate_rounds: int = Field(
        default=3, description="Debate rounds in a head-to-head match"
    )
    finals_debate_rounds: int = Field(
        default=3, description="Debate rounds in the King of the Hill finals"
    )
    max_cascade_depth: int = Field(
        default=16, description="Rounds one trigger may advance before giving up"
    )
    auto_start_when_full: bool = Field(
        default=False, description="Start a tournament as soon as its last seat is taken"
    )

    @field_validator("elimination_fraction")
    @classmethod
    def validate_fraction(cls, v):
        if not 0 < v < 1:
            raise ValueError("elimination_fraction must be between 0 and 1")
        return v

    @field_validator("valid_sizes")
    @classmethod
    def validate_sizes(cls, v):
        if not v or any(size < 2 for size in v):
            raise ValueError("valid_sizes must contain sizes of at least 2")
        return v


class DebateServiceConfig(BaseModel):
    """Connection to the debate subsystem."""

    base_url: Optional[str] = Field(
        default=None, description="Debate service URL (matches are left scheduled when unset)"
    )
    api_key: Optional[str] = Field(
        default=None, description="API key (can also be set via DEBATE_SERVICE_API_KEY env var)"
    )
    timeout: int = Field(default=30, description="Request timeout in seconds")


class JudgePoolConfig(BaseModel):
    """Connection to the judge pool that scores group rounds."""

    base_url: Optional[str] = Field(
        default=None, description="Judge pool URL (group rounds use event scores when unset)"
    )
    api_key: Optional[str] = Field(
        default=None, description="API key (can also be set via JUDGE_POOL_API_KEY env var)"
    )
    timeout: int = Field(default=60, description="Request timeout in seconds")


class SystemConfig(BaseModel):
    """System-wide configuration."""

    host: str = Field(default="0.0.0.0", description="Address the API server binds to")
    port: int = Field(default=8000, description="Port the API server listens on")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    tournament: TournamentConfig = Field(default_factory=TournamentConfig)
    debate_service: DebateServiceConfig = Field(default_factory=DebateServiceConfig)
    judge_pool: JudgePoolConfig = Field(default_factory=JudgePoolConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        # Validate required sections
        required_sections = ["tournament", "system"]
        missing_sections = [
            section for section in required_sections if section not in data
        ]
        if missing_sections:
            raise ValueError(f"Missing required config sections: {missing_sections}")

        config = cls(**data)
        config.apply_environment()
        return config

    def apply_environment(self) -> None:
        """Let environment variables supply API keys missing from the file."""
        self.debate_service.api_key = self.debate_service.api_key or os.getenv(
            "DEBATE_SERVICE_API_KEY"
        )
        self.judge_pool.api_key = self.judge_pool.api_key or os.getenv(
            "JUDGE_POOL_API_KEY"
        )

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config() -> AppConfig:
    """Load default configuration from tournament_config.json, creating it if needed."""
    config_path = Path(CONFIG_FILENAME)
    if not config_path.exists():
        template_config = get_template_config()
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(template_config.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        tournament=TournamentConfig(
            database_path="tournaments.db",
            valid_sizes=[4, 8, 16, 32, 64],
            elimination_fraction=0.25,
            judges_per_round=3,
            match_debate_rounds=3,
            finals_debate_rounds=3,
            max_cascade_depth=16,
            auto_start_when_full=False,
        ),
        debate_service=DebateServiceConfig(
            base_url=None,  # e.g. http://localhost:9000
            api_key=None,  # Or use DEBATE_SERVICE_API_KEY env var
            timeout=30,
        ),
        judge_pool=JudgePoolConfig(
            base_url=None,
            api_key=None,  # Or use JUDGE_POOL_API_KEY env var
            timeout=60,
        ),
        system=SystemConfig(host="0.0.0.0", port=8000, log_level="INFO"),
    )
