"""
Common Error Constants

Centralized error messages shared by the cart router, store and client.
"""

# Auth errors
ERROR_NO_AUTH_HEADER = "No authorization header"
ERROR_INVALID_SESSION = "Invalid or expired session"

# Cart errors
ERROR_CART_UNAVAILABLE = "Cart service unavailable"
ERROR_CART_FETCH_FAILED = "Failed to fetch server cart"
ERROR_CART_PUSH_FAILED = "Failed to sync cart to backend"
ERROR_PRODUCT_ID_REQUIRED = "productId cannot be empty"

# Generic errors
ERROR_INTERNAL = "Internal server error"
