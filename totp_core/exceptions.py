"""Exceptions raised by the OTP core and its collaborators."""


class TOTPError(Exception):
    """Base class for every error raised by this package."""


class OTPConfigurationError(TOTPError, ValueError):
    """Invalid digits, step, window, counter or hash algorithm."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class SecretExistsError(TOTPError):
    """A secret is already stored for this account."""

    def __init__(self, account: str):
        super().__init__(f"Account {account} already exists")
        self.account = account
