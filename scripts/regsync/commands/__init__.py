"""CLI command groups for RegulationsSync."""
