import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ClubhubError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UploadFailure(ClubhubError):
    """The image host rejected or failed to store one file of a batch."""

    def __init__(self, file_name: str, message: str):
        super().__init__(f"Failed to upload {file_name}: {message}", status_code=502)
        self.file_name = file_name
        self.reason = message


class RemoteDeleteFailure(ClubhubError):
    """Deleting an asset from the image host failed."""

    def __init__(self, public_id: str, message: str):
        super().__init__(f"Failed to delete {public_id} from image host: {message}", status_code=502)
        self.public_id = public_id


class ValidationFailure(ClubhubError):
    """A local file was rejected before any network call (size or type)."""

    def __init__(self, file_name: str, message: str):
        super().__init__(message, status_code=422)
        self.file_name = file_name


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClubhubError)
    async def clubhub_error_handler(request: Request, exc: ClubhubError) -> JSONResponse:
        content: dict[str, str] = {"detail": exc.message}
        if isinstance(exc, UploadFailure | ValidationFailure):
            content["file_name"] = exc.file_name
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
