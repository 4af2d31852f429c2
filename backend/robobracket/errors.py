"""
Scheduling error taxonomy.

InputError             caller mistake, rejected before anything is written
BracketIntegrityError  persisted matches no longer fit the bracket structure
SlotConflictError      advancement target slot already holds another team
AdvancementHaltedError category halted by an earlier integrity error
"""


class SchedulingError(Exception):
    """Base class for bracket/qualifier scheduling failures."""


class InputError(SchedulingError, ValueError):
    """Invalid generation request (empty team list, duplicates, bad round count...)."""


class BracketIntegrityError(SchedulingError):
    """The stored bracket cannot be interpreted; automatic advancement must stop."""

    def __init__(self, message: str, match_id=None):
        super().__init__(message)
        self.match_id = match_id


class SlotConflictError(BracketIntegrityError):
    """Refusing to overwrite a team that already advanced into the target slot."""

    def __init__(self, message: str, match_id=None, target_match_id=None, slot=None, occupant_id=None):
        super().__init__(message, match_id=match_id)
        self.target_match_id = target_match_id
        self.slot = slot
        self.occupant_id = occupant_id


class AdvancementHaltedError(BracketIntegrityError):
    """The category has an open advancement hold from an earlier integrity error."""
