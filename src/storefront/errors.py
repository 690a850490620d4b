"""Custom exceptions for storefront."""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class ProductNotFoundError(StorefrontError):
    """Raised when a product ID doesn't exist."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ProductUnavailableError(StorefrontError):
    """Raised when a product can't be added to a cart."""

    def __init__(self, product_id: int, reason: str):
        self.product_id = product_id
        self.reason = reason
        super().__init__(f"Product {product_id} is unavailable ({reason})")


class InvalidProductError(StorefrontError):
    """Raised when product fields fail validation."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid product: {reason}")


class CategoryNotFoundError(StorefrontError):
    """Raised when a category ID doesn't exist."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class CategoryExistsError(StorefrontError):
    """Raised when creating a category whose slug is taken."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category already exists: {category_id}")


class CategoryInUseError(StorefrontError):
    """Raised when deleting a category that still has products."""

    def __init__(self, category_id: str, product_count: int):
        self.category_id = category_id
        self.product_count = product_count
        super().__init__(
            f"Category '{category_id}' still has {product_count} product(s)"
        )


class InvalidCategoryError(StorefrontError):
    """Raised when a category label or slug is empty."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid category: {reason}")


class CommentNotFoundError(StorefrontError):
    """Raised when a comment ID doesn't exist."""

    def __init__(self, comment_id: int):
        self.comment_id = comment_id
        super().__init__(f"Comment not found: {comment_id}")


class InvalidCommentError(StorefrontError):
    """Raised when a comment has no content."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid comment: {reason}")


class OrderNotFoundError(StorefrontError):
    """Raised when an order code doesn't exist."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Order not found: {code}")


class OrderPersistenceError(StorefrontError):
    """Raised when an order can't be written to the order store."""

    def __init__(self, code: str, reason: str | None = None):
        self.code = code
        self.reason = reason
        msg = f"Could not persist order {code}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class DuplicateOrderCodeError(OrderPersistenceError):
    """Raised when an order code is already taken."""

    def __init__(self, code: str):
        super().__init__(code, "code already exists")


class EmptyCartError(StorefrontError):
    """Raised when an operation needs a non-empty cart."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Cart is empty")


class UserExistsError(StorefrontError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An account already exists for {email}")


class InvalidRegistrationError(StorefrontError):
    """Raised when registration fields are missing or too weak."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid registration: {reason}")


class InvalidCredentialsError(StorefrontError):
    """Raised when login credentials don't match."""

    def __init__(self):
        super().__init__("Invalid email or password")
