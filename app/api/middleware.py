"""Composition of CORS, rate limiting and error translation around API handlers."""

import functools
import logging
from typing import Awaitable, Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from app.api.cors import CORSPolicy
from app.models.auth import Denial
from app.services.rate_limiter import RateLimiter

logger = logging.getLogger("wellness")

Handler = Callable[[Request], Awaitable[Response]]

GENERIC_ERROR = "An error occurred processing your request"


def denial_response(denial: Denial) -> JSONResponse:
    """Render a denial as its JSON response."""
    return JSONResponse(denial.body(), status_code=denial.status_code, headers=denial.headers or None)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


class ApiMiddleware:
    """
    Wraps business handlers into the request pipeline.

    A composed handler runs, in order: CORS on a scaffold response, the
    optional rate limiter, the handler itself, then copies the scaffold's
    CORS headers onto whatever response is returned. Any exception raised
    along the way becomes a single 500 response.
    """

    def __init__(self, cors_policy: Optional[CORSPolicy], production: bool = False):
        """
        Initialize middleware composer.

        Args:
            cors_policy: Policy applied when CORS is enabled for a route
            production: Hide exception details in 500 responses
        """
        self.cors_policy = cors_policy
        self.production = production

    def wrap(
        self,
        handler: Handler,
        rate_limiter: Optional[RateLimiter] = None,
        enable_cors: bool = True,
    ) -> Handler:
        """Compose ``handler`` with CORS, ``rate_limiter`` and error handling."""
        use_cors = enable_cors and self.cors_policy is not None

        @functools.wraps(handler)
        async def composed(request: Request) -> Response:
            scaffold = Response()
            try:
                if use_cors:
                    self.cors_policy.apply(request, scaffold)

                    if request.method == "OPTIONS":
                        return CORSPolicy.copy_headers(scaffold, Response(status_code=204))

                if rate_limiter is not None:
                    denial = rate_limiter.check(request)
                    if denial is not None:
                        return CORSPolicy.copy_headers(scaffold, denial_response(denial))

                response = await handler(request)
                return CORSPolicy.copy_headers(scaffold, response)
            except Exception as e:
                logger.exception(f"API error in {request.method} {request.url.path}: {e}")
                message = GENERIC_ERROR if self.production else f"Error: {e}"
                return CORSPolicy.copy_headers(scaffold, error_response(500, message))

        return composed
