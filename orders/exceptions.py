"""Order workflow errors.

Each kind maps to its own HTTP status and ``code`` so clients can tell them
apart. Raising one aborts the operation before anything is written.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class OrderError(APIException):
    """Base class for order workflow errors."""


class ValidationError(OrderError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid order request.'
    default_code = 'invalid'


class NotFoundError(OrderError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ConflictError(OrderError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The order is already in that state.'
    default_code = 'conflict'


class PaymentRejectedError(OrderError):
    """A payment claim was refused; the order is left unpaid."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = 'Payment rejected.'
    default_code = 'payment_rejected'


class PaymentNotVerifiedError(PaymentRejectedError):
    default_detail = 'Payment could not be verified with the payment gateway.'
    default_code = 'payment_not_verified'


class TransactionReusedError(PaymentRejectedError):
    default_detail = 'This payment transaction has already been used.'
    default_code = 'transaction_reused'


class AmountMismatchError(PaymentRejectedError):
    default_detail = 'Paid amount does not match the order total.'
    default_code = 'amount_mismatch'
