"""
Analytics Errors
"""


class InsufficientDataError(ValueError):
    """Raised when an analysis needs more training sessions than were supplied"""

    def __init__(self, required: int, found: int, analysis: str = "analysis"):
        self.required = required
        self.found = found
        self.analysis = analysis
        super().__init__(
            f"Need at least {required} workout sessions for {analysis}. Found: {found}"
        )


class RoutineValidationError(ValueError):
    """Raised when a generated routine payload cannot be turned into a routine"""
