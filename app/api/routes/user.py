"""User profile, account deletion and bookmark endpoints."""

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.api.dependencies import authenticate, get_user_service
from app.api.middleware import ApiMiddleware, denial_response, error_response
from app.api.validation import read_json, validate_body
from app.models.auth import Denial
from app.models.user import DeleteAccountRequest, Profile, ProfileUpdateRequest, RegisterRequest
from app.services.rate_limiter import RateLimiter
from app.services.user_service import SavedKind, UserServiceError


def _profile_payload(profile: Profile) -> dict:
    return profile.model_dump(by_alias=True, mode="json", exclude={"user_id"})


async def get_profile(request: Request) -> Response:
    """Return the decrypted profile of the current user."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    try:
        profile = get_user_service(request).get_profile(auth.user_id)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse({"success": True, "profile": _profile_payload(profile)})


async def update_profile(request: Request) -> Response:
    """Update only the profile fields present in the body."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    result = await validate_body(request, ProfileUpdateRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        profile = await run_in_threadpool(get_user_service(request).update_profile, auth.user_id, result.data)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse({"success": True, "profile": _profile_payload(profile)})


async def create_user(request: Request) -> Response:
    """
    Create an account without starting a session.

    Unlike registration, a taken email is reported as a 409 conflict.
    """
    result = await validate_body(request, RegisterRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        user, profile = await run_in_threadpool(get_user_service(request).create_user, result.data)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse(
        {
            "success": True,
            "user": {
                "id": user.id,
                "firstName": profile.first_name,
                "lastName": profile.last_name,
                "email": user.email,
                "createdAt": user.created_at.isoformat(),
            },
        }
    )


async def delete_account(request: Request) -> Response:
    """Delete the account after password confirmation."""
    auth = authenticate(request)
    if isinstance(auth, Denial):
        return denial_response(auth)

    result = await validate_body(request, DeleteAccountRequest)
    if isinstance(result, Denial):
        return denial_response(result)

    try:
        await run_in_threadpool(get_user_service(request).delete_account, auth.user_id, result.data.password)
    except UserServiceError as e:
        return error_response(e.status_code, str(e))

    return JSONResponse({"success": True, "message": "User account deleted successfully"})


def _saved_endpoints(kind: SavedKind, id_field: str, label: str):
    """Build list/save/remove handlers for one kind of bookmark."""
    list_key = "savedTips" if kind == "tips" else "savedResources"
    noun = label.lower()

    async def list_saved(request: Request) -> Response:
        auth = authenticate(request)
        if isinstance(auth, Denial):
            return denial_response(auth)

        try:
            items = get_user_service(request).list_saved(auth.user_id, kind)
        except UserServiceError as e:
            return error_response(e.status_code, str(e))

        return JSONResponse(
            {"success": True, list_key: [item.model_dump(by_alias=True, mode="json") for item in items]}
        )

    async def save(request: Request) -> Response:
        auth = authenticate(request)
        if isinstance(auth, Denial):
            return denial_response(auth)

        body = await read_json(request)
        if isinstance(body, Denial):
            return denial_response(body)

        item_id = body.get(id_field)
        if not item_id or not isinstance(item_id, str):
            return error_response(400, f"{label} ID is required")

        try:
            await run_in_threadpool(get_user_service(request).save_item, auth.user_id, kind, item_id)
        except UserServiceError as e:
            return error_response(e.status_code, str(e))

        return JSONResponse({"success": True, "message": f"{label} saved successfully"})

    async def remove(request: Request) -> Response:
        auth = authenticate(request)
        if isinstance(auth, Denial):
            return denial_response(auth)

        item_id = request.query_params.get(id_field)
        if not item_id:
            return error_response(400, f"{label} ID is required")

        try:
            await run_in_threadpool(get_user_service(request).remove_item, auth.user_id, kind, item_id)
        except UserServiceError as e:
            return error_response(e.status_code, str(e))

        return JSONResponse({"success": True, "message": f"{label} removed from saved {noun}s"})

    list_saved.__name__ = f"list_saved_{kind}"
    save.__name__ = f"save_{kind}"
    remove.__name__ = f"remove_saved_{kind}"
    return list_saved, save, remove


def create_router(api: ApiMiddleware, limiters: dict[str, RateLimiter]) -> APIRouter:
    """Build the /api/user router with each endpoint wrapped by ``api``."""
    router = APIRouter(prefix="/api/user", tags=["User"])

    router.add_api_route(
        "/profile", api.wrap(get_profile, rate_limiter=limiters["api"]), methods=["GET", "OPTIONS"]
    )
    router.add_api_route("/profile", api.wrap(update_profile, rate_limiter=limiters["api"]), methods=["PUT"])
    router.add_api_route("/create", api.wrap(create_user, rate_limiter=limiters["api"]), methods=["POST", "OPTIONS"])
    router.add_api_route(
        "/delete", api.wrap(delete_account, rate_limiter=limiters["api"]), methods=["DELETE", "OPTIONS"]
    )

    for kind, id_field, label in (("tips", "tipId", "Tip"), ("resources", "resourceId", "Resource")):
        list_saved, save, remove = _saved_endpoints(kind, id_field, label)
        path = f"/saved-{kind}"
        router.add_api_route(path, api.wrap(list_saved), methods=["GET", "OPTIONS"])
        router.add_api_route(path, api.wrap(save), methods=["POST"])
        router.add_api_route(path, api.wrap(remove), methods=["DELETE"])

    return router
