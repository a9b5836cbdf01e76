"""Backend implementations of the core interfaces."""
