"""Social domain exports."""

from .models import FollowRelationship, MutualFollowStatus, RelationshipState  # noqa: F401
from .service import FollowOutcome, FollowService  # noqa: F401
