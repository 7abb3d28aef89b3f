"""
Match configuration.

Read from data/config.yaml when present, then overridden by environment
variables (TACTICS_ACTION_LIMIT, TACTICS_RNG_SEED).
"""

import logging
import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .units import Faction

logger = logging.getLogger(__name__)


@dataclass
class MatchConfig:
    action_limit: int = 3
    factions: list[Faction] = field(default_factory=list)  # empty: every faction on the grid
    rng_seed: Optional[int] = None

    @classmethod
    def load(cls, data_path: Path | str = "data") -> "MatchConfig":
        config_path = Path(data_path) / "config.yaml"
        data = {}
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Match config not found: {config_path}, using defaults")

        config = cls.from_dict(data.get("match", data))
        config.apply_env()
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "MatchConfig":
        try:
            factions = [Faction(f) for f in data.get("factions", [])]
        except ValueError as e:
            raise ValueError(f"invalid faction in match config: {e}") from e
        seed = data.get("rng_seed")
        return cls(
            action_limit=int(data.get("action_limit", 3)),
            factions=factions,
            rng_seed=int(seed) if seed is not None else None,
        )

    def apply_env(self):
        limit = os.getenv("TACTICS_ACTION_LIMIT")
        if limit:
            self.action_limit = int(limit)
        seed = os.getenv("TACTICS_RNG_SEED")
        if seed:
            self.rng_seed = int(seed)
