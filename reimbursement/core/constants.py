# reimbursement/core/constants.py

EXPENSE_CATEGORIES = [
    "Travel",
    "Accommodation",
    "Meals",
    "Supplies",
    "Entertainment",
    "Other",
]

ALLOWED_UPLOAD_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
}

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72
