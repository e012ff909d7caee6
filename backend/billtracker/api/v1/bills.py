# billtracker/api/v1/bills.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from billtracker.api.v1.deps import get_bill_repo, get_current_user, get_file_store
from billtracker.db import models
from billtracker.db.repositories import BillRepository
from billtracker.schemas.bill import (
    BillCreateRequest,
    BillOut,
    BillStatusUpdate,
    BillUpdate,
    PaymentInstructionsUpdate,
)
from billtracker.services.billing import set_status
from billtracker.services.due_dates import classify_due_status, local_today
from billtracker.services.errors import InvalidRange, PartialCreation
from billtracker.services.files import invoice_path, proof_path
from billtracker.services.recurrence import create_recurring_bills, expand_recurrence

router = APIRouter(tags=["bills"])

# NOT NULL columns a PATCH may change but never clear
REQUIRED_FIELDS = ("name", "amount", "due_date")


def bill_to_dict(bill: models.Bill, user: models.User) -> Dict[str, Any]:
    out = BillOut.model_validate(bill)
    out.due_status = classify_due_status(
        local_today(), bill.due_date, bill.status, user.notification_days_before
    ).value
    return out.model_dump(mode="json")


def _get_owned(repo: BillRepository, user: models.User, bill_id: int) -> models.Bill:
    bill = repo.find_one(user.id, bill_id)
    if not bill:
        # same answer for "missing" and "someone else's"
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill


@router.get("", response_model=List[Dict[str, Any]])
def list_bills(current_user: models.User = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repo)):
    return [bill_to_dict(b, current_user) for b in repo.find_by_owner(current_user.id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_bill(
    payload: BillCreateRequest,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
):
    """
    Single bill: {"name", "category", "amount", "due_date"}.
    Recurring: {"name", "category", "amount", "start_date", "end_date"} creates
    one bill per month and returns the list.
    """
    if payload.is_recurring:
        try:
            requests = expand_recurrence(payload, payload.start_date, payload.end_date)
        except InvalidRange as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        try:
            created = create_recurring_bills(repo, current_user.id, requests)
        except PartialCreation as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "error": "Recurring series partially created",
                    "created_ids": [b.id for b in exc.created],
                    "requested": len(requests),
                },
            )
        return [bill_to_dict(b, current_user) for b in created]

    if payload.due_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="due_date or start_date/end_date required")
    bill = repo.insert(
        models.Bill(
            user_id=current_user.id,
            name=payload.name,
            category=payload.category,
            amount=payload.amount,
            due_date=payload.due_date,
            status=models.BillStatus.pending,
        )
    )
    return bill_to_dict(bill, current_user)


@router.get("/{bill_id}")
def get_bill(bill_id: int, current_user: models.User = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repo)):
    return bill_to_dict(_get_owned(repo, current_user, bill_id), current_user)


@router.patch("/{bill_id}")
def update_bill(
    bill_id: int,
    payload: BillUpdate,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
):
    patch = payload.model_dump(exclude_unset=True)
    nulls = sorted(k for k in REQUIRED_FIELDS if k in patch and patch[k] is None)
    if nulls:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"cannot be null: {', '.join(nulls)}")
    if "category" in patch:
        patch["category"] = (patch["category"] or "").strip() or None
    try:
        bill = repo.update(current_user.id, bill_id, patch)
    except Exception:
        repo.db.rollback()
        raise
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill_to_dict(bill, current_user)


@router.patch("/{bill_id}/status")
def update_bill_status(
    bill_id: int,
    payload: BillStatusUpdate,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
):
    bill = _get_owned(repo, current_user, bill_id)
    patch = set_status(bill, payload.status.value, paid_at=payload.paid_at)
    bill = repo.update(current_user.id, bill_id, patch)
    return bill_to_dict(bill, current_user)


@router.patch("/{bill_id}/payment-instructions")
def update_payment_instructions(
    bill_id: int,
    payload: PaymentInstructionsUpdate,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
):
    # stored as sent; reminder e-mails reproduce it character for character
    bill = repo.update(current_user.id, bill_id, {"payment_instructions": payload.payment_instructions or None})
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill_to_dict(bill, current_user)


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(
    bill_id: int,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
    file_store=Depends(get_file_store),
):
    bill = _get_owned(repo, current_user, bill_id)
    stored = []
    if bill.invoice_file:
        stored.append(invoice_path(bill.invoice_file))
    if bill.proof_file:
        stored.append(proof_path(bill.proof_file))

    if not repo.delete(current_user.id, bill_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    for path in stored:
        file_store.delete(path)
    return None
