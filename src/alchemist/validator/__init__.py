from alchemist.validator.engine import ValidationEngine, validate_datasets

__all__ = ["ValidationEngine", "validate_datasets"]
