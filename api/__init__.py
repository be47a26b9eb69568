"""HTTP API for LLM Check."""
