"""
Retention Use Cases
"""

from .run_retention_sweep_use_case import RetentionSweepResponse, RunRetentionSweepUseCase

__all__ = ["RunRetentionSweepUseCase", "RetentionSweepResponse"]
