"""
Runtime configuration loaded from environment variables.

Typical usage:
    settings = get_settings()
    orchestrator = RecommendationOrchestrator(max_results=settings.max_recommendations)
"""
import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field

_settings = None

class Settings(BaseModel):
    """Tunable knobs. Coefficient tables live in services.constants."""
    table_name: Optional[str] = None
    log_level: str = "INFO"
    deficiency_warning_ratio: float = Field(0.7, gt=0, le=1)
    max_recommendations: int = Field(10, gt=0)
    candidate_food_limit: int = Field(100, gt=0)
    preference_limit: int = Field(20, gt=0)
    strategy_timeout_seconds: float = Field(5.0, gt=0)
    handler_timeout_seconds: float = Field(5.0, gt=0)
    event_log_size: int = Field(100, ge=0)
    preference_scoring_policy: str = Field("additive", pattern="^(additive|blended)$")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables, ignoring unset ones.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Validated Settings instance

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        names = {
            "table_name": "CYCLEFUEL_TABLE_NAME",
            "log_level": "LOG_LEVEL",
            "deficiency_warning_ratio": "DEFICIENCY_WARNING_RATIO",
            "max_recommendations": "MAX_RECOMMENDATIONS",
            "candidate_food_limit": "CANDIDATE_FOOD_LIMIT",
            "preference_limit": "PREFERENCE_LIMIT",
            "strategy_timeout_seconds": "STRATEGY_TIMEOUT_SECONDS",
            "handler_timeout_seconds": "HANDLER_TIMEOUT_SECONDS",
            "event_log_size": "EVENT_LOG_SIZE",
            "preference_scoring_policy": "PREFERENCE_SCORING_POLICY",
        }
        values = {field: environ[var] for field, var in names.items() if var in environ}
        return cls(**values)

def get_settings() -> Settings:
    """Get or create the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings

def reset_settings() -> None:
    """Drop cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
