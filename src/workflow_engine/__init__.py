"""workflow-engine - pipeline runner for security and build CI tools."""

__version__ = "0.1.0"
