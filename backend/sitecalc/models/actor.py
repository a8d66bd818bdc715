"""
Who is asking. Passed explicitly to every repository call that picks the
guest or user document set; the estimate engine never sees it.
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Guest:
    pass


@dataclass(frozen=True)
class UserActor:
    user_id: str


Actor = Union[Guest, UserActor]

GUEST = Guest()


def owner_key(actor: Actor) -> Optional[str]:
    """Owner id stored on documents: the user id, or None for guest documents."""
    if isinstance(actor, UserActor):
        return actor.user_id
    return None
