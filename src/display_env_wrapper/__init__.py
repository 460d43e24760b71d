"""display-env-wrapper: borrow the active user's graphical session for a program."""

__version__ = "1.0.0"
