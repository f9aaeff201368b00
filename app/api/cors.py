"""Cross-origin resource sharing policy."""

from fastapi import Request, Response

from app.models.config import CORSSettings


class CORSPolicy:
    """Decides cross-origin permissions and stamps them onto responses."""

    def __init__(
        self,
        origins: list[str],
        methods: list[str],
        headers: list[str],
        allow_credentials: bool = True,
        max_age: int = 86400,
    ):
        self.origins = list(origins)
        self.methods = list(methods)
        self.headers = list(headers)
        self.allow_credentials = allow_credentials
        self.max_age = max_age

    @classmethod
    def from_settings(cls, settings: CORSSettings, production: bool) -> "CORSPolicy":
        """Production gets the restricted origin list, everything else the local-dev origins."""
        return cls(
            origins=settings.production_origins if production else settings.development_origins,
            methods=settings.allowed_methods,
            headers=settings.allowed_headers,
            allow_credentials=settings.allow_credentials,
            max_age=settings.max_age,
        )

    def is_allowed(self, origin: str) -> bool:
        return origin in self.origins

    def apply(self, request: Request, response: Response) -> Response:
        """
        Set Access-Control-* headers for ``request`` on ``response``.

        The origin is only reflected when allowed; methods, headers,
        credentials and max-age are always set. Nothing is ever blocked here.
        """
        origin = request.headers.get("origin")
        if origin and self.is_allowed(origin):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers.append("Vary", "Origin")

        response.headers["Access-Control-Allow-Methods"] = ",".join(self.methods)
        response.headers["Access-Control-Allow-Headers"] = ", ".join(self.headers)
        if self.allow_credentials:
            response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Max-Age"] = str(self.max_age)
        return response

    @staticmethod
    def copy_headers(source: Response, target: Response) -> Response:
        """Copy every Access-Control-* header (and Vary) from ``source`` onto ``target``."""
        for key, value in source.headers.items():
            lowered = key.lower()
            if lowered.startswith("access-control-"):
                target.headers[key] = value
            elif lowered == "vary":
                target.headers.append("Vary", value)
        return target
