"""Error taxonomy shared by the session, CSRF and transfer layers.

Every error carries a stable ``code`` (used in redirects and logs) and a
human readable ``message`` (shown in the page alert box).
"""

import logging


class BankError(Exception):
    code = "error"
    message = "An error occurred."
    log_level = logging.ERROR

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class Unauthenticated(BankError):
    code = "mustlogin"
    message = "You have not logged in. Please login."
    log_level = logging.INFO


class InvalidCredentials(BankError):
    code = "invalidcredentials"
    message = "Invalid credentials. Please try again."
    log_level = logging.INFO


# ============================================================
# CSRF
# ============================================================

class CsrfRejected(BankError):
    code = "csrf"
    message = "CSRF check failed."
    log_level = logging.WARNING


class CsrfMissing(CsrfRejected):
    code = "csrfmissing"
    message = "Missing CSRF token."


class CsrfMismatch(CsrfRejected):
    code = "csrfmismatch"
    message = "CSRF token mismatch."


# ============================================================
# TRANSFERS
# ============================================================

class TransferRejected(BankError):
    code = "rejected"
    message = "Transfer rejected."
    log_level = logging.INFO


class InvalidCoupon(TransferRejected):
    code = "invalidcoupon"
    message = "Invalid coupon code."


class InvalidAmount(TransferRejected):
    code = "invalidamount"
    message = "Invalid transfer amount."


class InvalidRecipient(TransferRejected):
    code = "invalidrecipient"
    message = "Invalid recipient."


class InsufficientFunds(TransferRejected):
    code = "insufficientfunds"
    message = "Insufficient funds."


TRANSFER_ERRORS = {
    cls.code: cls
    for cls in (InvalidCoupon, InvalidAmount, InvalidRecipient, InsufficientFunds)
}
