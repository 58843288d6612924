"""Core ports and application state."""
