"""Authentication API endpoints."""

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    authenticate,
    get_cookie_policy,
    get_token_service,
    get_user_service,
)
from app.api.middleware import ApiMiddleware, denial_response, error_response
from app.api.validation import validate_body
from app.models.auth import ChangeEmailRequest, ChangePasswordRequest, Denial, LoginRequest
from app.models.user import RegisterRequest, UserSummary
from app.services.rate_limiter import RateLimiter
from app.services.user_service import UserServiceError


def _with_session(request: Request, response: Response, user_id: str) -> Response:
    """Issue a fresh token for ``user_id`` and set it as the session cookie."""
    policy = get_cookie_policy(request)
    policy.write(response, policy.build(get_token_service(request).issue(user_id)))
    return response


async def login(request: Request) -> Response:
    """
    Authenticate with email and password.

    Returns the user and token, and sets the token as an HTTP-only cookie.
    """
    result = await validate_body(request, LoginRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        user = await run_in_threadpool(get_user_service(request).login, result.data.email, result.data.password)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    token = get_token_service(request).issue(user.id)
    response = JSONResponse(
        {
            "success": True,
            "user": UserSummary(id=user.id, email=user.email, created_at=user.created_at).model_dump(
                by_alias=True, mode="json"
            ),
            "token": token,
        }
    )
    policy = get_cookie_policy(request)
    policy.write(response, policy.build(token))
    return response


async def register(request: Request) -> Response:
    """Create an account and its profile."""
    result = await validate_body(request, RegisterRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        user, profile = await run_in_threadpool(get_user_service(request).register, result.data)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    user_data = UserSummary(id=user.id, email=user.email, created_at=user.created_at).model_dump(
        by_alias=True, mode="json"
    )
    user_data["profile"] = {"firstName": profile.first_name, "lastName": profile.last_name}
    return JSONResponse({"success": True, "user": user_data})


async def logout(request: Request) -> Response:
    """
    End the session on this client.

    Tokens are stateless and stay valid until they expire; logging out only
    expires the cookie.
    """
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    response = JSONResponse({"success": True, "message": "Successfully logged out"})
    policy = get_cookie_policy(request)
    policy.write(response, policy.expired())
    return response


async def change_password(request: Request) -> Response:
    """Change the password and re-issue the session cookie with a fresh expiry."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    result = await validate_body(request, ChangePasswordRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        user = await run_in_threadpool(
            get_user_service(request).change_password,
            auth.user_id,
            result.data.current_password,
            result.data.new_password,
        )
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    response = JSONResponse({"success": True, "message": "Password updated successfully"})
    return _with_session(request, response, user.id)


async def change_email(request: Request) -> Response:
    """Change the account email."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    result = await validate_body(request, ChangeEmailRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        await run_in_threadpool(
            get_user_service(request).change_email,
            auth.user_id,
            result.data.current_email,
            result.data.new_email,
        )
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse({"success": True, "message": "Email updated successfully"})


async def check(request: Request) -> Response:
    """Report whether the session cookie belongs to an existing user."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    try:
        user = get_user_service(request).get_user(auth.user_id)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse({"success": True, "isAuthenticated": True, "user": {"id": user.id}})


def create_router(api: ApiMiddleware, limiters: dict[str, RateLimiter]) -> APIRouter:
    """Build the /api/auth router with each endpoint wrapped by ``api``."""
    router = APIRouter(prefix="/api/auth", tags=["Authentication"])

    router.add_api_route("/login", api.wrap(login, rate_limiter=limiters["auth"]), methods=["POST", "OPTIONS"])
    router.add_api_route(
        "/register", api.wrap(register, rate_limiter=limiters["auth"]), methods=["POST", "OPTIONS"]
    )
    router.add_api_route("/logout", api.wrap(logout), methods=["POST", "OPTIONS"])
    router.add_api_route(
        "/password",
        api.wrap(change_password, rate_limiter=limiters["password"]),
        methods=["PUT", "OPTIONS"],
    )
    router.add_api_route("/email", api.wrap(change_email), methods=["PUT", "OPTIONS"])
    router.add_api_route("/check", api.wrap(check), methods=["GET", "OPTIONS"])

    return router
