from .runner import build, run, STAGES

__all__ = ["build", "run", "STAGES"]
