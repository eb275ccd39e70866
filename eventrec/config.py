from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .ranking.diversify import DEFAULT_LAMBDA, DEFAULT_POOL_CAP
from .ranking.similarity import STRATEGIES
from .ranking.time_fit import DEFAULT_MIN_TIME_FIT, TIME_FIT_POLICIES

load_dotenv()

SYNONYMS_PATH = os.getenv("SYNONYMS_PATH")
EMBEDDING_DIM = int(os.getenv("EMBEDDING_DIM", "384"))

WEIGHT_TOTAL = 1.0

# (w_text, w_time, w_pop) per strategy
REFERENCE_WEIGHTS: dict[str, tuple[float, float, float]] = {
    "lexical": (0.5, 0.3, 0.2),
    "semantic": (0.6, 0.2, 0.2),
}


@dataclass(frozen=True)
class RankingConfig:
    strategy: str = "lexical"
    time_fit_policy: str = "containment"
    w_text: float = 0.5
    w_time: float = 0.3
    w_pop: float = 0.2
    mmr_lambda: float = DEFAULT_LAMBDA
    pool_cap: int = DEFAULT_POOL_CAP
    min_time_fit: Optional[float] = None  # None → policy default

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {sorted(STRATEGIES)}, got {self.strategy!r}")
        if self.time_fit_policy not in TIME_FIT_POLICIES:
            raise ValueError(
                f"time_fit_policy must be one of {sorted(TIME_FIT_POLICIES)}, got {self.time_fit_policy!r}"
            )
        weights = (self.w_text, self.w_time, self.w_pop)
        if any(w <= 0 for w in weights):
            raise ValueError(f"weights must be positive, got {weights}")
        if not math.isclose(sum(weights), WEIGHT_TOTAL, abs_tol=1e-9):
            raise ValueError(f"weights must sum to {WEIGHT_TOTAL}, got {sum(weights)}")
        if not 0.0 <= self.mmr_lambda <= 1.0:
            raise ValueError(f"mmr_lambda must be in [0, 1], got {self.mmr_lambda}")
        if self.pool_cap < 1:
            raise ValueError(f"pool_cap must be >= 1, got {self.pool_cap}")

    @classmethod
    def for_strategy(cls, strategy: str, **overrides) -> "RankingConfig":
        """Reference weights for `strategy`, with optional field overrides."""
        w_text, w_time, w_pop = REFERENCE_WEIGHTS.get(strategy, REFERENCE_WEIGHTS["lexical"])
        fields = {"strategy": strategy, "w_text": w_text, "w_time": w_time, "w_pop": w_pop}
        fields.update(overrides)
        return cls(**fields)

    @property
    def time_fit_threshold(self) -> float:
        if self.min_time_fit is not None:
            return self.min_time_fit
        return DEFAULT_MIN_TIME_FIT[self.time_fit_policy]


def _env_float(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise EnvironmentError(f"Invalid {name}={raw!r}: expected a number") from None


def load_ranking_config(env: Optional[Mapping[str, str]] = None) -> RankingConfig:
    """
    Build RankingConfig from RANK_* environment variables.

    Unset weights fall back to the strategy's reference weights.
    Invalid values raise EnvironmentError (fail fast at startup).
    """
    env = os.environ if env is None else env

    strategy = (env.get("RANK_STRATEGY") or "lexical").strip().lower()
    overrides: dict = {
        "time_fit_policy": (env.get("RANK_TIME_FIT_POLICY") or "containment").strip().lower(),
    }
    for field, var in (
        ("w_text", "RANK_W_TEXT"),
        ("w_time", "RANK_W_TIME"),
        ("w_pop", "RANK_W_POP"),
        ("mmr_lambda", "RANK_MMR_LAMBDA"),
        ("min_time_fit", "RANK_MIN_TIME_FIT"),
    ):
        value = _env_float(env, var)
        if value is not None:
            overrides[field] = value

    pool_cap = _env_float(env, "RANK_POOL_CAP")
    if pool_cap is not None:
        overrides["pool_cap"] = int(pool_cap)

    try:
        return RankingConfig.for_strategy(strategy, **overrides)
    except ValueError as e:
        raise EnvironmentError(f"Invalid ranking configuration: {e}") from e
