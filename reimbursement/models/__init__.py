from reimbursement.models.user import User
from reimbursement.models.expense_request import ExpenseRequest, RequestStatus
from reimbursement.models.approval import Approval
from reimbursement.models.comment import Comment

__all__ = [
    "User",
    "ExpenseRequest",
    "RequestStatus",
    "Approval",
    "Comment",
]
