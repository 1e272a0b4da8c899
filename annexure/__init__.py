"""Bill annexure generator: extract, reconcile and report medical bills."""

__version__ = "0.1.0"
