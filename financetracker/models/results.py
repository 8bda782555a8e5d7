"""
Backend Result Variants

The webhook backend signals outcomes through loosely-typed JSON
(`success`, `upgrade_required`, free-form `error` text). Controllers never
branch on those keys directly. Every call is classified into exactly one of
these variants first.

    Ok              success:true, carries the full payload
    Rejected        success:false, recoverable, message shown inline
    QuotaExceeded   success:false with upgrade_required
    TransportError  network failure or unparsable response
    AuthExpired     HTTP 401, the session is already gone
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class Ok(BaseModel):
    payload: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)


class Rejected(BaseModel):
    message: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


class QuotaExceeded(Rejected):
    pass


class TransportError(BaseModel):
    detail: str = ""


class AuthExpired(BaseModel):
    message: Optional[str] = None


BackendResult = Union[Ok, QuotaExceeded, Rejected, TransportError, AuthExpired]


def classify(payload: Any) -> BackendResult:
    """
    Classify a decoded response body.

    A body that is not a JSON object is a protocol failure, not a rejection.
    """
    if not isinstance(payload, dict):
        return TransportError(detail=f"Unexpected response body: {type(payload).__name__}")

    if payload.get("success"):
        return Ok(payload=payload)

    error = payload.get("error") or None
    if payload.get("upgrade_required"):
        return QuotaExceeded(message=error, payload=payload)
    return Rejected(message=error, payload=payload)
