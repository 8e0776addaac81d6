"""Project-wide DRF exception handler.

Known API errors keep DRF's ``{"detail": ...}`` body and gain a ``code``.
Anything DRF does not handle is logged and turned into a plain 500 so no
traceback reaches the client.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response(
            {'detail': 'Internal server error.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(response.data, dict) and 'detail' in response.data and 'code' not in response.data:
        codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
        if isinstance(codes, str):
            response.data['code'] = codes

    return response
