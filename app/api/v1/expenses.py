"""Expense endpoints"""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, http_error
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.database import get_db
from app.models.user import User
from app.schemas.expense import ExpenseCreate, ExpenseListResponse, ExpenseResponse
from app.services.expense_service import ExpenseService

router = APIRouter(prefix="/groups/{group_id}/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    group_id: UUID,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new expense in a group.

    The payer defaults to the current user. Their own share starts out paid.

    Args:
        group_id: Group ID
        expense_data: Expense data with the shared-with list and optional split
        current_user: Current authenticated user
        db: Database session

    Returns:
        Created expense with each participant's share

    Raises:
        400: If the split is invalid or payer/participants are not members
        403: If the current user may not create expenses in the group
        404: If group not found
    """
    try:
        expense = await ExpenseService.create_expense(group_id, expense_data, current_user.id, db)
        return ExpenseService.build_expense_response(expense)
    except (ValidationError, AuthorizationError, NotFoundError) as e:
        raise http_error(e)


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List a group's expenses, most recent first, with the viewer's share.

    Raises:
        403: If the current user is not a member
        404: If group not found
    """
    try:
        expenses = await ExpenseService.get_group_expenses(group_id, current_user.id, db)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)

    return ExpenseListResponse(
        items=[ExpenseService.build_list_item(e, current_user.id) for e in expenses]
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    group_id: UUID,
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get expense details with every participant's share and status.

    Raises:
        403: If the current user is not a member
        404: If group or expense not found
    """
    try:
        expense = await ExpenseService.get_expense_details(group_id, expense_id, current_user.id, db)
        return ExpenseService.build_expense_response(expense)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    group_id: UUID,
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete an expense (payer only).

    Raises:
        403: If the current user is not the payer
        404: If expense not found
    """
    try:
        await ExpenseService.delete_expense(group_id, expense_id, current_user.id, db)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{expense_id}/pay", response_model=ExpenseResponse)
async def pay_share(
    group_id: UUID,
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Mark the current user's share as paid.

    Raises:
        400: If the current user is not a participant
        403: If the current user is not a member
        404: If expense not found
    """
    try:
        expense = await ExpenseService.mark_share_paid(group_id, expense_id, current_user.id, db)
        return ExpenseService.build_expense_response(expense)
    except (ValidationError, AuthorizationError, NotFoundError) as e:
        raise http_error(e)


@router.post("/{expense_id}/complete", response_model=ExpenseResponse)
async def complete_expense(
    group_id: UUID,
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Mark an expense as complete (payer only).

    Raises:
        403: If the current user is not the payer
        404: If expense not found
    """
    try:
        expense = await ExpenseService.mark_complete(group_id, expense_id, current_user.id, db)
        return ExpenseService.build_expense_response(expense)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)
