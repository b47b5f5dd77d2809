# reimbursement/api/expenses.py

import logging
from datetime import datetime, time, timedelta
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import update
from sqlalchemy.orm import Query as OrmQuery, Session, joinedload, selectinload

from reimbursement.core.constants import EXPENSE_CATEGORIES
from reimbursement.core.permissions import (
    Principal,
    get_active_principal,
    get_current_principal,
    require_active_approver,
    require_approver,
)
from reimbursement.db.session import get_db
from reimbursement.models.approval import Approval
from reimbursement.models.comment import Comment
from reimbursement.models.expense_request import ExpenseRequest, RequestStatus
from reimbursement.schemas.expense_request import (
    AllExpensesQuery,
    CommentCreate,
    CommentOut,
    ExpenseCreate,
    ExpenseDetail,
    ExpenseOut,
    ExpensePage,
    ExpenseQuery,
    ExpenseUpdate,
    StatusUpdate,
    StatusUpdateResult,
)
from reimbursement.utils.cleanup import delete_expense_tree

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Expenses"])


# --------------------------------------------------
# INTERNAL HELPERS
# --------------------------------------------------
def get_expense_or_404(db: Session, expense_id: UUID) -> ExpenseRequest:
    expense = db.query(ExpenseRequest).filter_by(id=expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense request not found")
    return expense


def apply_filters(query: OrmQuery, filters: ExpenseQuery) -> OrmQuery:
    if filters.status != "ALL":
        query = query.filter(ExpenseRequest.status == RequestStatus(filters.status))
    if filters.category:
        query = query.filter(ExpenseRequest.category == filters.category)
    if filters.from_date:
        query = query.filter(
            ExpenseRequest.created_at >= datetime.combine(filters.from_date, time.min)
        )
    if filters.to_date:
        # whole day inclusive
        query = query.filter(
            ExpenseRequest.created_at
            < datetime.combine(filters.to_date + timedelta(days=1), time.min)
        )
    return query


def paginate(query: OrmQuery, filters: ExpenseQuery) -> dict:
    total = query.count()
    expenses = (
        query.options(joinedload(ExpenseRequest.user))
        .order_by(ExpenseRequest.created_at.desc())
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )
    return {"expenses": expenses, "total": total}


# --------------------------------------------------
# CATEGORIES
# --------------------------------------------------
@router.get("/categories", response_model=list[str])
def get_categories():
    return EXPENSE_CATEGORIES


# --------------------------------------------------
# LIST ALL (APPROVER / ADMIN)
# --------------------------------------------------
@router.get("", response_model=ExpensePage)
def get_all(
    filters: Annotated[AllExpensesQuery, Query()],
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_approver),
):
    query = apply_filters(db.query(ExpenseRequest), filters)
    if filters.user_id:
        query = query.filter(ExpenseRequest.user_id == filters.user_id)
    return paginate(query, filters)


# --------------------------------------------------
# LIST MINE
# --------------------------------------------------
@router.get("/mine", response_model=ExpensePage)
def get_my_expenses(
    filters: Annotated[ExpenseQuery, Query()],
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    query = db.query(ExpenseRequest).filter(ExpenseRequest.user_id == principal.id)
    return paginate(apply_filters(query, filters), filters)


# --------------------------------------------------
# GET ONE
# --------------------------------------------------
@router.get("/{expense_id}", response_model=ExpenseDetail)
def get_by_id(
    expense_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    expense = (
        db.query(ExpenseRequest)
        .options(
            joinedload(ExpenseRequest.user),
            selectinload(ExpenseRequest.approvals).joinedload(Approval.approver),
            selectinload(ExpenseRequest.comments).joinedload(Comment.user),
        )
        .filter(ExpenseRequest.id == expense_id)
        .first()
    )

    if not expense:
        raise HTTPException(status_code=404, detail="Expense request not found")
    if expense.user_id != principal.id and not principal.is_approver:
        raise HTTPException(status_code=403, detail="Not authorized to view this expense request")

    return expense


# --------------------------------------------------
# CREATE
# --------------------------------------------------
@router.post("", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_active_principal),
):
    expense = ExpenseRequest(
        **payload.model_dump(),
        status=RequestStatus.PENDING,
        user_id=principal.id,
    )

    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info("expense id=%s created by user id=%s", expense.id, principal.id)
    return expense


# --------------------------------------------------
# UPDATE (OWNER, PENDING ONLY)
# --------------------------------------------------
@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: UUID,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    expense = get_expense_or_404(db, expense_id)

    if expense.user_id != principal.id:
        raise HTTPException(status_code=403, detail="Not authorized to update this expense request")
    if expense.status != RequestStatus.PENDING:
        raise HTTPException(status_code=400, detail="Processed expense requests cannot be updated")

    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None and k in ("title", "amount"):
            continue
        setattr(expense, k, v)

    db.commit()
    db.refresh(expense)
    return expense


# --------------------------------------------------
# DELETE (OWNER WHILE PENDING, ADMIN ALWAYS)
# --------------------------------------------------
@router.delete("/{expense_id}", response_model=ExpenseOut)
def delete_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    expense = get_expense_or_404(db, expense_id)

    if expense.user_id != principal.id and not principal.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to delete this expense request")
    if expense.status != RequestStatus.PENDING and not principal.is_admin:
        raise HTTPException(status_code=400, detail="Processed expense requests cannot be deleted")

    deleted = ExpenseOut.model_validate(expense)

    try:
        delete_expense_tree(db, expense.id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("expense id=%s deleted by user id=%s", expense_id, principal.id)
    return deleted


# --------------------------------------------------
# APPROVE / REJECT
# --------------------------------------------------
@router.post("/{expense_id}/status", response_model=StatusUpdateResult)
def update_status(
    expense_id: UUID,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_active_approver),
):
    expense = get_expense_or_404(db, expense_id)

    if expense.user_id == principal.id:
        raise HTTPException(status_code=400, detail="You cannot decide on your own expense request")

    already_decided = (
        db.query(Approval)
        .filter(Approval.expense_id == expense.id, Approval.approver_id == principal.id)
        .first()
    )
    if already_decided:
        raise HTTPException(status_code=400, detail="You have already processed this expense request")

    if expense.status != RequestStatus.PENDING:
        raise HTTPException(status_code=400, detail="Expense request has already been processed")

    try:
        approval = Approval(
            status=payload.status,
            comment=payload.comment,
            expense_id=expense.id,
            approver_id=principal.id,
        )
        db.add(approval)

        # first writer wins
        result = db.execute(
            update(ExpenseRequest)
            .where(
                ExpenseRequest.id == expense.id,
                ExpenseRequest.status == RequestStatus.PENDING,
            )
            .values(status=payload.status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise HTTPException(status_code=400, detail="Expense request has already been processed")

        if payload.comment:
            db.add(
                Comment(
                    content=payload.comment,
                    expense_id=expense.id,
                    user_id=principal.id,
                )
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(expense)
    db.refresh(approval)

    logger.info(
        "expense id=%s %s by user id=%s",
        expense.id,
        payload.status.value,
        principal.id,
    )
    return {"expense": expense, "approval": approval}


# --------------------------------------------------
# COMMENTS
# --------------------------------------------------
@router.post(
    "/{expense_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    expense_id: UUID,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_active_principal),
):
    expense = get_expense_or_404(db, expense_id)

    if expense.user_id != principal.id and not principal.is_approver:
        raise HTTPException(status_code=403, detail="Not authorized to comment on this expense request")

    comment = Comment(
        content=payload.content,
        expense_id=expense.id,
        user_id=principal.id,
    )

    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/comments/{comment_id}", response_model=CommentOut)
def delete_comment(
    comment_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    comment = db.query(Comment).filter_by(id=comment_id).first()
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")

    if comment.user_id != principal.id and not principal.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to delete this comment")

    deleted = CommentOut.model_validate(comment)

    db.delete(comment)
    db.commit()
    return deleted
