"""AI layer: LLM providers and repair-run monitoring."""
