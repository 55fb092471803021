"""Diagnosis, prognosis and per-domain scoring engines."""

from physio.engines.differential import DifferentialDiagnosisEngine
from physio.engines.recovery import RecoveryTrajectoryEngine, classify_tissue

__all__ = ["DifferentialDiagnosisEngine", "RecoveryTrajectoryEngine", "classify_tissue"]
