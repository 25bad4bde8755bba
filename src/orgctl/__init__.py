"""orgctl — organisation manager for persons, teams and their audit trail."""

__version__ = "0.1.0"
