"""Account endpoints — create accounts and manage signal thresholds."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models.database import Account, get_db
from app.models.schemas import AccountCreate, AccountOut, SignalThresholds, SignalThresholdsUpdate
from app.services.scoring import validate_thresholds

router = APIRouter(prefix="/accounts", tags=["accounts"])


def resolve_thresholds(account: Optional[Account]) -> SignalThresholds:
    """Account thresholds, falling back to the configured defaults."""
    settings = get_settings()
    if account is None or account.signal_good_threshold is None or account.signal_bad_threshold is None:
        return SignalThresholds(
            good_threshold=settings.default_good_threshold,
            bad_threshold=settings.default_bad_threshold,
        )
    return SignalThresholds(
        good_threshold=account.signal_good_threshold,
        bad_threshold=account.signal_bad_threshold,
        is_custom=True,
    )


async def get_account_or_404(db: AsyncSession, account_id: int) -> Account:
    account = await db.get(Account, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.post("", response_model=AccountOut, status_code=201)
async def create_account(data: AccountCreate, db: AsyncSession = Depends(get_db)):
    """Create an account."""
    account = Account(name=data.name)
    db.add(account)
    await db.flush()
    return account


@router.get("/{account_id}", response_model=AccountOut)
async def get_account(account_id: int, db: AsyncSession = Depends(get_db)):
    return await get_account_or_404(db, account_id)


@router.get("/{account_id}/signal-thresholds", response_model=SignalThresholds)
async def get_signal_thresholds(account_id: int, db: AsyncSession = Depends(get_db)):
    """Thresholds used to label scores Good / Neutral / Bad."""
    account = await get_account_or_404(db, account_id)
    return resolve_thresholds(account)


@router.put("/{account_id}/signal-thresholds", response_model=SignalThresholds)
async def update_signal_thresholds(
    account_id: int,
    data: SignalThresholdsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Set the account's Good / Bad thresholds (fractions of 100, bad < good)."""
    account = await get_account_or_404(db, account_id)
    try:
        validate_thresholds(data.good_threshold, data.bad_threshold)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    account.signal_good_threshold = data.good_threshold
    account.signal_bad_threshold = data.bad_threshold
    await db.flush()
    return resolve_thresholds(account)
