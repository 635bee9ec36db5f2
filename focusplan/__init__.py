"""focusplan - day planning and execution tracking backend."""

__version__ = "0.1.0"
