class LedgerError(Exception):
    """Base class for errors the API reports back to the caller."""
    pass


class ProductNotFoundError(LedgerError):
    """Exception raised when the requested product doesn't exist."""
    pass


class DuplicateSKUError(LedgerError):
    """Exception raised when a SKU is already used by another product."""
    pass


class InvalidQuantityError(LedgerError):
    """Exception raised when a quantity is zero or negative."""
    pass


class InsufficientStockError(LedgerError):
    """Exception raised when an outgoing quantity exceeds stock under the reject policy."""
    pass


class UserNotFoundError(LedgerError):
    """Exception raised when the requested user doesn't exist."""
    pass


class DuplicateUserError(LedgerError):
    """Exception raised when a username or email is already taken."""
    pass


class AuthenticationError(LedgerError):
    """Exception raised when a login attempt fails."""
    pass
