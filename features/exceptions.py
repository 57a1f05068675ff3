# features/exceptions.py
"""
Exceptions raised by the habit tree engine.
"""


class HabitTreeError(Exception):
    """Base exception for the habit tree"""
    pass


class NothingToUndo(HabitTreeError):
    """
    Undo was requested but the completion history is empty.
    State is left untouched when this is raised.
    """
    def __init__(self):
        super().__init__("No actions to undo.")
