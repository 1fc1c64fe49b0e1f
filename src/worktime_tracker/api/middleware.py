"""RFC 9457 problem details for API errors and mapping of service results."""

from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..core.enums import ErrorKind
from ..core.result import Err, Result
from ..utils.logging_config import get_logger

logger = get_logger('api')

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NO_ACTIVE_SESSION: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_TITLES = {
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.NO_ACTIVE_SESSION: "No Active Session",
    ErrorKind.VALIDATION_ERROR: "Validation Error",
    ErrorKind.STORAGE_ERROR: "Storage Error",
}


class ProblemDetailsException(HTTPException):
    """Enhanced HTTPException that includes RFC 9457 Problem Details."""

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        **extra_fields,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.title = title
        self.type_uri = type_uri or f"https://httpstatuses.com/{status_code}"
        self.instance = instance
        self.extra_fields = extra_fields


def create_problem_response(
    status_code: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: Optional[str] = None,
    instance: Optional[str] = None,
    **extra_fields,
) -> JSONResponse:
    """Create a JSON response in RFC 9457 Problem Details format."""
    problem = {
        "type": type_uri or f"https://httpstatuses.com/{status_code}",
        "title": title,
        "status": status_code,
    }

    if detail:
        problem["detail"] = detail
    if instance:
        problem["instance"] = instance

    problem.update(extra_fields)

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(problem),
        media_type="application/problem+json",
    )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    return create_problem_response(
        status_code=exc.status_code,
        title=exc.title,
        detail=exc.detail,
        type_uri=exc.type_uri,
        instance=exc.instance or str(request.url),
        **exc.extra_fields,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return create_problem_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        title="Validation Error",
        detail="Request validation failed",
        instance=str(request.url),
        kind=ErrorKind.VALIDATION_ERROR.value,
        errors=exc.errors(),
    )


def unwrap_result(result: Result) -> Any:
    """Return the payload of an ``Ok`` or raise the matching problem details."""
    if isinstance(result, Err):
        status_code = ERROR_STATUS[result.kind]
        if status_code >= 500:
            logger.error(f"Request failed with {result.kind.value}: {result.message}")
        raise ProblemDetailsException(
            status_code=status_code,
            title=ERROR_TITLES[result.kind],
            detail=result.message,
            kind=result.kind.value,
        )
    return result.value
