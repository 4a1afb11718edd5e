# feature_board/config/constants.py
from typing import Dict, List

CATEGORY_OPTIONS: List[str] = ["BackOffice", "POS", "Beep"]

SUBCATEGORY_OPTIONS: Dict[str, List[str]] = {
    "BackOffice": [
        "Reports",
        "Products",
        "CRM",
        "Stock management",
        "Employee management",
        "Promotions",
        "Billing",
        "BackOffice Others",
    ],
    "POS": [
        "Hardware",
        "Order management",
        "Payments",
        "Cashier management",
        "Receipts",
        "POS Others",
    ],
    "Beep": [],  # No subcategories for Beep
}

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6

MAX_AI_TAGS = 4
MAX_MANUAL_TAGS = 5

# Preferred tag vocabulary offered to the tagging model
PREFERRED_TAGS: List[str] = [
    "UI/UX",
    "Performance",
    "Feature Request",
    "Bug Fix",
    "Integration",
    "Mobile",
    "Desktop",
    "API",
    "Security",
    "Analytics",
    "Workflow",
    "Automation",
    "Export",
    "Admin",
    "User Management",
]
FALLBACK_TAG = "Feature Request"

FEEDBACK_SHEET_HEADERS: List[str] = [
    "ID",
    "Title",
    "Description",
    "Category",
    "Sub-category",
    "Status",
    "Votes",
    "Submitted At",
    "Updated At",
    "Is Approved",
    "Moderated At",
    "Moderated By",
    "Admin Notes",
    "Tags",
    "Voted By",
]

INSIGHT_SHEET_HEADERS: List[str] = [
    "Theme",
    "Insight Summary",
    "Priority Score",
    "Feedback Count",
    "Sample Feedback IDs",
    "Generated At",
]

# Validation errors
TITLE_REQUIRED = "Title is required"
TITLE_TOO_SHORT = f"Title must be at least {TITLE_MIN_LENGTH} characters"
TITLE_TOO_LONG = f"Title must be no more than {TITLE_MAX_LENGTH} characters"
DESCRIPTION_REQUIRED = "Description is required"
DESCRIPTION_TOO_SHORT = f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
DESCRIPTION_TOO_LONG = f"Description must be no more than {DESCRIPTION_MAX_LENGTH} characters"
CATEGORY_REQUIRED = "Category is required"
CATEGORY_INVALID = "Category must be one of: " + ", ".join(CATEGORY_OPTIONS)
SUBCATEGORY_REQUIRED = "Sub-category is required for this category"
SUBCATEGORY_INVALID = "Sub-category is not valid for this category"
VOTE_IDS_REQUIRED = "Feedback ID and User ID are required"
TAGS_INVALID = "Tags must be an array of strings"
TAGS_REQUIRED = "At least one valid tag is required"
STATUS_INVALID = "Status is not valid"

# Auth errors
CREDENTIALS_REQUIRED = "Email and password are required"
SIGNUP_FIELDS_REQUIRED = "Username, email, and password are required"
EMAIL_INVALID = "Invalid email format"
USERNAME_INVALID = (
    f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters "
    "and contain only letters, numbers, and underscores"
)
PASSWORD_TOO_SHORT = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
USER_EXISTS = "User with this email or username already exists"
INVALID_CREDENTIALS = "Invalid email or password"

# API errors
FEEDBACK_NOT_FOUND = "Feedback not found"
VALIDATION_FAILED = "Validation failed"
UNAUTHORIZED = "Unauthorized"
SERVER_CONFIGURATION_ERROR = "Server configuration error"
INTERNAL_ERROR = "Internal server error"
DATABASE_CONNECTION_FAILED = "Database connection failed"

# Success messages
FEEDBACK_SUBMITTED = "Feedback submitted successfully!"
SIGNUP_SUCCESS = "Account created successfully"
LOGIN_SUCCESS = "Login successful"
DATABASE_CONNECTION_OK = "Database connection successful"
