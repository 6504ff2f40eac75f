"""Domain errors raised by the storage layer."""


class StorageError(Exception):
    """Base class for storage errors."""


class UserAlreadyExistsError(StorageError):
    """An account with this email is already registered."""


class UserNotFoundError(StorageError):
    """No user matches the given identifier."""


class TelegramAlreadyLinkedError(StorageError):
    """The Telegram account is linked to a different user."""


class TelegramAccountNotFoundError(StorageError):
    """No Telegram account matches the given Telegram id."""
