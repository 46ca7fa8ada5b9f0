"""Split editor endpoints"""
from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.split import (SplitDefaultRequest, SplitPreviewRequest,
                               SplitPreviewResponse, SplitSpec, SplitType)
from app.services.split_calculator import (compute_shares, default_split,
                                           to_amounts_from_percent,
                                           to_percentages, validate_split)
from app.utils.decimal_utils import sum_decimals

router = APIRouter(prefix="/splits", tags=["Splits"])


@router.post("/preview", response_model=SplitPreviewResponse)
async def preview_split(
    request: SplitPreviewRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Preview the shares a split would produce, without saving anything.

    An invalid split still returns the shares it would compute; the
    validation field says whether it would be accepted on create.
    """
    shares = compute_shares(request.amount, request.participant_ids, request.split)

    percent_amounts = {}
    if request.split and request.split.type == SplitType.PERCENT.value:
        percent_amounts = to_amounts_from_percent(
            request.amount,
            {a.user: a.value for a in request.split.allocations if a.user},
        )

    return SplitPreviewResponse(
        shares=shares,
        percentages=to_percentages(shares),
        percent_amounts=percent_amounts,
        total_assigned=sum_decimals(shares.values()),
        validation=validate_split(request.amount, request.participant_ids, request.split),
    )


@router.post("/default", response_model=SplitSpec)
async def default_split_config(
    request: SplitDefaultRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Starting configuration when the editor switches split type.

    Percent and amount splits start from equal parts; an equal split
    carries zero values.
    """
    return default_split(request.type, request.participant_ids, request.amount)
