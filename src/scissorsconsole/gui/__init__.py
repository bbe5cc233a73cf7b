"""PySide6 desktop shell for the console (window, host worker, entry point)."""
