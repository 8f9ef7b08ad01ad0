from .validators import ConsistencyValidator, ValidationReport, RULE_GROUPS
from .engine import run_validation, verify

__all__ = ["ConsistencyValidator", "ValidationReport", "RULE_GROUPS", "run_validation", "verify"]
