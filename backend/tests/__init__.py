import os

# Keep app startup (init_db) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from robobracket.models.advancement_hold import AdvancementHold  # noqa: E402,F401
from robobracket.models.category_result import CategoryResult  # noqa: E402,F401
from robobracket.models.event import Event  # noqa: E402,F401
from robobracket.models.match import Match  # noqa: E402,F401
from robobracket.models.qualifier_bye import QualifierBye  # noqa: E402,F401
from robobracket.models.team import Team  # noqa: E402,F401
