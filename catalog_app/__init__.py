"""Baby-name catalog service package."""
