from alchemist.session.session import CorrectionOutcome, DatasetSnapshot, ValidationSession

__all__ = ["CorrectionOutcome", "DatasetSnapshot", "ValidationSession"]
