from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from fastapi.responses import JSONResponse, Response

if TYPE_CHECKING:
    from app.upstream.errors import ErrorKind


@dataclass(frozen=True)
class ForwardSuccess:
    """Upstream 2xx answer; ``body`` is relayed byte for byte."""

    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return True

    def to_response(self) -> Response:
        return Response(
            content=self.body,
            status_code=self.status_code,
            media_type="application/json",
        )


@dataclass(frozen=True)
class ForwardFailure:
    """Normalized failure, rendered as ``{error, message?, ...extra}``."""

    kind: "ErrorKind"
    status_code: int
    error: str
    message: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        body.update(self.extra)
        return body

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.payload())


ForwardResult = Union[ForwardSuccess, ForwardFailure]
