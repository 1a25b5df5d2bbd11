"""Success side of the response envelope ``{success, message?, data?}``."""

from __future__ import annotations

from typing import Any, Optional

from rest_framework import status
from rest_framework.response import Response


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return Response(body, status=status_code)
