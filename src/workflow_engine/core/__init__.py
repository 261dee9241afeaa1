"""Core utilities shared by the shell, pipeline and CLI packages."""
