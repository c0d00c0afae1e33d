from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope used for every response body, success or failure."""
    statusCode: int
    data: Any = None
    message: str = "Success"
    success: bool = True
    errors: Optional[List[str]] = None


def api_response(
    status_code: int,
    data: Any = None,
    message: str = "Success",
    errors: Optional[List[str]] = None,
) -> JSONResponse:
    content = {
        "statusCode": status_code,
        "data": jsonable_encoder(data),
        "message": message,
        "success": status_code < 400,
    }
    # errors key only appears when there is something to report
    if errors:
        content["errors"] = list(errors)
    return JSONResponse(status_code=status_code, content=content)
