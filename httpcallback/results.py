"""
Action results: what a controller wants written, decoupled from the writing.

A controller returns one of these values. Dispatch later hands it a
ResponseWriter and the result renders itself onto it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from fastapi import Response
from fastapi.encoders import jsonable_encoder


class ResponseWriter:
    """Collects a single response and converts it into a FastAPI Response."""

    def __init__(self):
        self.status_code: Optional[int] = None
        self.headers: Dict[str, str] = {}
        self.body = b""

    @property
    def written(self) -> bool:
        return self.status_code is not None

    def write_header(self, status_code: int) -> None:
        if self.written:
            raise RuntimeError(
                f"status {self.status_code} already written, refusing {status_code}"
            )
        self.status_code = status_code

    def write(self, data: bytes) -> None:
        if not self.written:
            self.write_header(200)
        self.body += data

    def to_response(self) -> Response:
        return Response(
            content=self.body,
            status_code=self.status_code or 200,
            headers=self.headers,
        )


class ActionResult(Protocol):
    def write_response(self, writer: ResponseWriter) -> None:
        ...


@dataclass(frozen=True)
class JsonResult:
    """Serializes a mapping, dataclass or pydantic model as a JSON body."""

    payload: Any
    status_code: int = 200

    def write_response(self, writer: ResponseWriter) -> None:
        body = json.dumps(jsonable_encoder(self.payload)).encode("utf-8")
        writer.headers["Content-Type"] = "application/json"
        writer.write_header(self.status_code)
        writer.write(body)


@dataclass(frozen=True)
class StatusResult:
    """Bare status code, no body."""

    status_code: int

    def write_response(self, writer: ResponseWriter) -> None:
        writer.write_header(self.status_code)


ACTION_RESULT_TYPES = (JsonResult, StatusResult)
