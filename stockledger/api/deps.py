from fastapi import Header
from typing import Optional

from stockledger.services.ledger_service import SYSTEM_ACTOR

# Matches the created_by columns and User.username
ACTOR_MAX_LENGTH = 50


def get_actor(
    x_username: Optional[str] = Header(
        None,
        max_length=ACTOR_MAX_LENGTH,
        description="Username recorded as the creator of ledger entries",
    )
) -> str:
    """Acting user for ledger writes; 'system' when the header is absent."""
    if x_username and x_username.strip():
        return x_username.strip()
    return SYSTEM_ACTOR
