"""Balance endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, http_error
from app.core.exceptions import AuthorizationError, NotFoundError
from app.database import get_db
from app.models.user import User
from app.schemas.balance import GroupBalancesResponse, MemberBalance
from app.services.balance_service import BalanceService

router = APIRouter(prefix="/groups/{group_id}/balances", tags=["Balances"])


@router.get("", response_model=GroupBalancesResponse)
async def get_group_balances(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the balance of every member of the group.

    All balances are computed from the same snapshot of the group's
    expenses, so what one member is owed matches what the others owe.

    Raises:
        403: If the current user is not a member
        404: If group not found
    """
    try:
        balances = await BalanceService.get_group_balances(group_id, current_user.id, db)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)

    return GroupBalancesResponse(group_id=group_id, balances=balances)


@router.get("/me", response_model=MemberBalance)
async def get_my_balance(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the current user's balance within the group.

    Positive net_balance means the others owe the current user.
    """
    try:
        return await BalanceService.get_member_balance(
            group_id, current_user.id, current_user.id, db
        )
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)


@router.get("/{member_id}", response_model=MemberBalance)
async def get_member_balance(
    group_id: UUID,
    member_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get another member's balance within the group.

    Raises:
        403: If the current user is not a member
        404: If group not found or member_id is not in the group
    """
    try:
        return await BalanceService.get_member_balance(
            group_id, member_id, current_user.id, db
        )
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)
