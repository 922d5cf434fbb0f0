"""smarttodo - task list ranked by priority and deadline urgency."""

__version__ = "0.1.0"
