from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from reimbursement.models.approval import Approval
from reimbursement.models.comment import Comment
from reimbursement.models.expense_request import ExpenseRequest


def delete_expense_tree(db: Session, expense_id) -> None:
    """Remove an expense after its comments and approvals.

    Does not commit; the caller owns the transaction.
    """
    db.query(Comment).filter(Comment.expense_id == expense_id).delete(
        synchronize_session=False
    )
    db.query(Approval).filter(Approval.expense_id == expense_id).delete(
        synchronize_session=False
    )
    db.query(ExpenseRequest).filter(ExpenseRequest.id == expense_id).delete(
        synchronize_session=False
    )


def delete_user_tree(db: Session, user_id) -> None:
    """Remove everything that references a user, children before parents.

    Does not commit; the caller owns the transaction.
    """
    owned = select(ExpenseRequest.id).where(ExpenseRequest.user_id == user_id)

    db.query(Comment).filter(
        or_(Comment.expense_id.in_(owned), Comment.user_id == user_id)
    ).delete(synchronize_session=False)
    db.query(Approval).filter(
        or_(Approval.expense_id.in_(owned), Approval.approver_id == user_id)
    ).delete(synchronize_session=False)
    db.query(ExpenseRequest).filter(ExpenseRequest.user_id == user_id).delete(
        synchronize_session=False
    )
