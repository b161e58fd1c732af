"""Core citation models, style rules and generation."""
