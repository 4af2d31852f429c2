from robobracket.models.advancement_hold import AdvancementHold
from robobracket.models.category_result import CategoryResult
from robobracket.models.event import Event
from robobracket.models.match import Match
from robobracket.models.qualifier_bye import QualifierBye
from robobracket.models.team import Team

__all__ = [
    "Event",
    "Team",
    "Match",
    "CategoryResult",
    "QualifierBye",
    "AdvancementHold",
]
