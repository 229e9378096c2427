"""
Error taxonomy shared by the points, items and swaps services.

Every service error carries a machine readable ``code``, the offending
``field`` (or lifecycle state) when there is one, and whether retrying the
same call can succeed. Views turn these into JSON bodies with
:func:`service_error_response`.
"""
from rest_framework import status
from rest_framework.response import Response


class ServiceError(Exception):
    """Base exception for marketplace service errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'service_error'
    retryable = False

    def __init__(self, message='', *, field=None, code=None):
        super().__init__(message)
        self.message = message
        self.field = field
        if code is not None:
            self.code = code

    def as_dict(self):
        body = {'error': self.message, 'code': self.code}
        if self.field:
            body['field'] = self.field
        if self.retryable:
            body['retryable'] = True
        return body


class NotFoundError(ServiceError):
    """Referenced user, item or swap does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'


class InvalidStateError(ServiceError):
    """Record is in the wrong lifecycle stage for the transition."""
    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_state'


class ForbiddenError(ServiceError):
    """Caller lacks ownership or role."""
    status_code = status.HTTP_403_FORBIDDEN
    code = 'forbidden'


class InvalidArgumentError(ServiceError):
    """Malformed or inconsistent payload."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'invalid_argument'


class InsufficientFundsError(InvalidArgumentError):
    """Point balance is below the required cost."""
    code = 'insufficient_funds'


class InternalFailureError(ServiceError):
    """Storage failure; the caller may retry."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = 'internal_failure'
    retryable = True


def service_error_response(exc):
    """Build the HTTP response for a service error."""
    return Response(exc.as_dict(), status=exc.status_code)
