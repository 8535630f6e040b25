"""
Solver settings using pydantic-settings.

Every search parameter can be set through a ROOMING_-prefixed environment
variable or a .env file. Settings are loaded once and cached.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rooming.models import AnnealingParams, HybridParams, LocalSearchParams

from .errors import InvalidSettingError

STRATEGIES = ("hill_climb", "fast_hill_climb", "annealing", "hybrid")


class SolverSettings(BaseSettings):
    """
    Default search configuration.

    The defaults match the tuned values used by the web solve endpoint:
    fast hill climbing with 50 random restarts and 750 perturbations.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOMING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    strategy: str = Field(
        default="fast_hill_climb",
        description="Search strategy: hill_climb, fast_hill_climb, annealing or hybrid",
    )
    seed: int = Field(default=42, description="Seed for the caller-owned random source")

    # === Iterated local search ===
    num_random: int = Field(default=50, ge=0, description="Randomized restarts")
    num_perturb: int = Field(default=750, ge=0, description="Perturbation trials")
    perturb_min: int = Field(default=3, ge=0, description="Minimum units moved per perturbation")
    perturb_max: int = Field(default=8, ge=1, description="Exclusive upper bound on units moved")

    # === Simulated annealing ===
    sa_restarts: int = Field(default=20, ge=0)
    sa_steps: int = Field(default=10000, ge=1)
    sa_temp_high: float = Field(default=5.0, gt=0)
    sa_temp_low: float = Field(default=0.01, gt=0)

    # === Hybrid annealing + hill climb ===
    hybrid_restarts: int = Field(default=50, ge=0)
    hybrid_steps: int = Field(default=5000, ge=1)
    hybrid_temp_high: float = Field(default=10.0, gt=0)
    hybrid_temp_low: float = Field(default=0.1, gt=0)

    # === Parallel trials ===
    trials: int = Field(default=1, ge=1, description="Independent trials merged into one result")
    max_workers: int | None = Field(default=None, ge=1, description="Worker pool size for trials")

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v: str) -> str:
        value = str(v).strip().lower()
        if value not in STRATEGIES:
            raise ValueError(f"unknown strategy '{v}', expected one of {', '.join(STRATEGIES)}")
        return value

    def build_params(self) -> LocalSearchParams | AnnealingParams | HybridParams:
        """Build the validated params model for the configured strategy.

        Raises:
            InvalidSettingError: if the combination of values is invalid
        """
        try:
            if self.strategy == "annealing":
                return AnnealingParams(
                    restarts=self.sa_restarts,
                    steps=self.sa_steps,
                    temp_high=self.sa_temp_high,
                    temp_low=self.sa_temp_low,
                )
            if self.strategy == "hybrid":
                return HybridParams(
                    restarts=self.hybrid_restarts,
                    steps=self.hybrid_steps,
                    temp_high=self.hybrid_temp_high,
                    temp_low=self.hybrid_temp_low,
                )
            return LocalSearchParams(
                strategy=self.strategy,  # type: ignore[arg-type]
                num_random=self.num_random,
                num_perturb=self.num_perturb,
                perturb_min=self.perturb_min,
                perturb_max=self.perturb_max,
            )
        except ValidationError as e:
            raise InvalidSettingError(f"Invalid {self.strategy} settings: {e}") from e


@lru_cache
def get_settings() -> SolverSettings:
    """Get cached settings instance.

    Raises:
        InvalidSettingError: if the environment holds an invalid value
    """
    try:
        return SolverSettings()
    except ValidationError as e:
        raise InvalidSettingError(f"Invalid solver settings: {e}") from e
