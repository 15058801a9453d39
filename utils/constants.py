"""
utils/constants.py

Purpose: Centralized static content

- Client-facing error messages
- Sort keys and filter sentinels

(Prevents hardcoding across the codebase)
"""

# ============================================================
# QUERY PARAMETERS
# ============================================================

ALL_CATEGORIES = "All"
SORT_BY_LIKES = "likes"
SORT_BY_REVIEWS = "reviews"

# ============================================================
# MESSAGES
# ============================================================

MSG_UNAUTHORIZED = "Unauthorized access"
MSG_FORBIDDEN = "Forbidden access"
MSG_PAYMENT_REQUIRED = "Payment required: upgrade your badge to use this feature"
MSG_MEAL_NOT_FOUND = "Meal not found"
MSG_UPCOMING_MEAL_NOT_FOUND = "Upcoming meal not found"
MSG_REQUEST_NOT_FOUND = "Meal request not found"
MSG_USER_NOT_FOUND = "User not found"
MSG_REVIEW_NOT_FOUND = "You have not reviewed this meal"
MSG_ALREADY_LIKED = "You have already liked this meal"
MSG_ALREADY_REQUESTED = "You have already request this meal"
MSG_ALREADY_DELIVERED = "This request has already been delivered"
MSG_PAYMENT_NOT_VERIFIED = "Payment could not be verified with the payment processor"
MSG_PAYMENT_UNAVAILABLE = "Payment processor is unavailable"
