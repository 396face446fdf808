"""
Configuration module for the District AQI System.

Settings are read from environment variables prefixed with DISTRICTAQI_.
A .env file in the working directory is loaded first, so local overrides do
not need to be exported by hand.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv


@dataclass(frozen=True)
class Settings:
    """
    Tunable parameters of the aggregation pipeline.

    Attributes:
        buffer_radius: Tolerance radius of the buffer tier, in metres
        max_distance: Distance ceiling of the nearest tier, in metres
        synthetic_seed: Seed for synthetic district values; None = unseeded
        n_jobs: joblib worker count for per-station work (-1 = all cores)
        log_dir: Directory of the persistent cycle log
    """

    buffer_radius: float = 50.0
    max_distance: float = 5000.0
    synthetic_seed: Optional[int] = None
    n_jobs: int = 1
    log_dir: Path = Path("logs")

    def __post_init__(self) -> None:
        if self.buffer_radius < 0:
            raise ValueError("buffer_radius must be >= 0")
        if self.max_distance < 0:
            raise ValueError("max_distance must be >= 0")
        if self.n_jobs == 0:
            raise ValueError("n_jobs must not be 0")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Builds settings from environment variables.

        Recognized variables:
        - DISTRICTAQI_BUFFER_RADIUS_M (default 50)
        - DISTRICTAQI_MAX_DISTANCE_M (default 5000)
        - DISTRICTAQI_SYNTHETIC_SEED (default unset)
        - DISTRICTAQI_N_JOBS (default 1)
        - DISTRICTAQI_LOG_DIR (default "logs")

        Args:
            env: Mapping to read from; if None, loads .env and reads os.environ

        Returns:
            The Settings instance

        Raises:
            ValueError: If a variable holds an unparseable or out-of-range value
        """
        if env is None:
            load_dotenv(find_dotenv(usecwd=True))
            env = os.environ

        seed = env.get("DISTRICTAQI_SYNTHETIC_SEED", "").strip()
        return cls(
            buffer_radius=float(env.get("DISTRICTAQI_BUFFER_RADIUS_M", cls.buffer_radius)),
            max_distance=float(env.get("DISTRICTAQI_MAX_DISTANCE_M", cls.max_distance)),
            synthetic_seed=int(seed) if seed else None,
            n_jobs=int(env.get("DISTRICTAQI_N_JOBS", cls.n_jobs)),
            log_dir=Path(env.get("DISTRICTAQI_LOG_DIR", str(cls.log_dir))),
        )
