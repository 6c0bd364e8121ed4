"""Task time tracker: lifecycle state machine, per-task locking and a console front end."""

__version__ = "0.1.0"
