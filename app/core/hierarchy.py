import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import crud_user
from app.schemas.hierarchy import HierarchyParticipant
from app.core.constants import ADMIN, REGISTERED_USER, MANAGEMENT_TIER_RANK
from app.core.exceptions import HierarchyMalformed

logger = logging.getLogger(__name__)

def resolve_participants(db: Session, user_id: int, *, customer_id: Optional[int] = None) -> List[HierarchyParticipant]:
    """
    Resolve who takes part in a transaction's commission.

    Walks parent_id upward from `user_id` (normally the service agent who processed the
    transaction) and emits one participant per management tier, stopping after the admin.
    A registered user at the start of the walk is stepped over. Tiers must appear in
    strictly ascending order; a repeated or out-of-order tier raises HierarchyMalformed
    rather than paying a tier twice.

    Gaps are not errors: a missing parent ends the walk and the tiers above it are
    forfeited, and inactive users are passed through without being emitted.

    The registered_user participant is the customer (`customer_id`), whatever their
    position in the hierarchy.
    """
    participants: List[HierarchyParticipant] = []
    visited = set()
    last_rank = 0

    current = crud_user.get_user(db, user_id)
    if current is None:
        logger.warning(f"Hierarchy start user ID: {user_id} not found. Management tiers are forfeited.")
    elif current.user_type == REGISTERED_USER:
        visited.add(current.id)
        current = crud_user.get_user(db, current.parent_id) if current.parent_id else None
        if current is None:
            logger.info(f"Registered user ID: {user_id} has no assigned service agent. Management tiers are forfeited.")

    while current is not None:
        if current.id in visited:
            raise HierarchyMalformed(f"Parent cycle detected at user {current.id}", user_id=current.id)
        visited.add(current.id)

        rank = MANAGEMENT_TIER_RANK.get(current.user_type)
        if rank is None:
            raise HierarchyMalformed(
                f"User {current.id} of type '{current.user_type}' cannot appear in the management chain above user {user_id}",
                user_id=current.id,
            )
        if rank <= last_rank:
            raise HierarchyMalformed(
                f"Tier '{current.user_type}' (user {current.id}) appears twice or out of order in the chain above user {user_id}",
                user_id=current.id,
            )
        last_rank = rank

        if current.is_active:
            participants.append(HierarchyParticipant(user_type=current.user_type, user_id=current.id))
        else:
            logger.info(f"User ID: {current.id} ({current.user_type}) is inactive. Tier share is forfeited.")

        if current.user_type == ADMIN:
            break
        if current.parent_id is None:
            logger.info(f"User ID: {current.id} ({current.user_type}) has no parent. Tiers above it are forfeited.")
            break
        parent = crud_user.get_user(db, current.parent_id)
        if parent is None:
            logger.warning(f"Parent ID: {current.parent_id} of user ID: {current.id} not found. Tiers above it are forfeited.")
        current = parent

    if customer_id is not None:
        customer = crud_user.get_user(db, customer_id)
        if customer and customer.is_active:
            participants.append(HierarchyParticipant(user_type=REGISTERED_USER, user_id=customer.id))
        else:
            logger.info(f"Customer ID: {customer_id} not found or inactive. Registered user incentive is forfeited.")

    return participants
