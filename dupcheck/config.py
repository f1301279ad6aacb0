"""Configuration management using Pydantic BaseSettings.

All settings can be supplied through ``DEDUP_*`` environment variables or a
``.env`` file. ``DedupConfig`` is the plain view of the tuning knobs the
detector consumes, so the engine itself never reads the environment.
"""
from dataclasses import dataclass
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class DedupConfig:
    """Thresholds and limits used by one ``DuplicateDetector``."""

    near_threshold: int = 85
    review_threshold: int = 60
    min_similarity: int = 30
    top_k: int = 5
    length_ratio_floor: float = 0.5
    max_workers: int = 1
    parallel_threshold: int = 64


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Classification thresholds (percent)
    near_threshold: int = Field(85, ge=1, le=100, description="Similarity at or above which content is a near duplicate")
    review_threshold: int = Field(60, ge=0, le=100, description="Similarity at or above which content is flagged for review")

    # Ranking
    min_similarity: int = Field(30, ge=0, le=100, description="Similar items below this score are dropped")
    top_k: int = Field(5, ge=1, le=50, description="Maximum similar items returned")
    length_ratio_floor: float = Field(0.5, ge=0.0, le=1.0, description="Length ratio below which a candidate is skipped")
    max_workers: int = Field(1, ge=1, le=64, description="Threads used to rank candidates (1 = sequential)")
    parallel_threshold: int = Field(64, ge=1, description="Minimum candidate count before ranking fans out")

    # Audit store
    audit_backend: str = Field("memory", description="Audit store backend: memory, file")
    audit_file_path: str = Field(".dupcheck/audit.jsonl", description="JSONL audit log path for the file backend")
    default_list_limit: int = Field(50, ge=1, le=200, description="Default number of checks listed per project")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Metrics
    metrics_enabled: bool = Field(False, description="Emit DogStatsD metrics")
    dd_agent_host: str = Field("localhost", description="DogStatsD host")
    dd_agent_port: int = Field(8125, ge=1, le=65535, description="DogStatsD port")
    metrics_prefix: str = Field("dupcheck", description="Metric namespace")

    model_config = {
        "env_prefix": "DEDUP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('audit_backend')
    @classmethod
    def validate_audit_backend(cls, v):
        if v.lower() not in ['memory', 'file']:
            raise ValueError('audit_backend must be "memory" or "file"')
        return v.lower()

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    def validate_configuration(self) -> List[str]:
        """Validate cross-field constraints and return any issues."""
        issues = []

        if self.review_threshold > self.near_threshold:
            issues.append("DEDUP_REVIEW_THRESHOLD must not exceed DEDUP_NEAR_THRESHOLD")

        if self.min_similarity > self.review_threshold:
            issues.append("DEDUP_MIN_SIMILARITY above DEDUP_REVIEW_THRESHOLD hides reviewable items")

        if self.near_threshold < 50:
            issues.append("DEDUP_NEAR_THRESHOLD is very low, may flag many false duplicates")

        if self.length_ratio_floor > 0.9:
            issues.append("DEDUP_LENGTH_RATIO_FLOOR is very high, most candidates will be skipped")

        return issues

    def dedup_config(self) -> DedupConfig:
        """Return the detector view of these settings."""
        return DedupConfig(
            near_threshold=self.near_threshold,
            review_threshold=self.review_threshold,
            min_similarity=self.min_similarity,
            top_k=self.top_k,
            length_ratio_floor=self.length_ratio_floor,
            max_workers=self.max_workers,
            parallel_threshold=self.parallel_threshold,
        )

    def log_configuration(self) -> None:
        """Log the current configuration."""
        from dupcheck.utils.logger import log_info

        log_info("Configuration loaded",
                 near_threshold=self.near_threshold,
                 review_threshold=self.review_threshold,
                 min_similarity=self.min_similarity,
                 top_k=self.top_k,
                 length_ratio_floor=self.length_ratio_floor,
                 max_workers=self.max_workers,
                 audit_backend=self.audit_backend,
                 metrics_enabled=self.metrics_enabled,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
