"""
FILE: repost/core/models.py
PURPOSE: Domain models for requests, variables, options, extractions and responses
EXPORTS:
  - Request (dataclass)
  - Variable (dataclass)
  - RequestOption (dataclass)
  - Extraction (dataclass)
  - Response (dataclass)
DEPENDENCIES:
  - dataclasses (stdlib)
  - json (stdlib)
  - typing (stdlib)
NOTES:
  - All models have from_row() for SQLite row conversion
  - Headers are stored as newline-separated "Key: Value" lines
  - Response extractions are stored as a JSON object
  - Timestamps stored as ISO-8601 strings
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import json


def _split_lines(text: Optional[str]) -> List[str]:
    return [line for line in (text or "").split("\n") if line]


@dataclass
class Request:
    """A named HTTP request template."""

    name: str
    method: str
    url: str
    headers: List[str] = field(default_factory=list)
    body: Optional[bytes] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Request":
        """Convert SQLite row to Request object."""
        return cls(
            name=row["name"],
            method=row["method"],
            url=row["url"],
            headers=_split_lines(row["headers"]),
            body=row["body"],
            created_at=row["created_at"],
        )

    @property
    def header_pairs(self) -> List[Tuple[str, str]]:
        """Headers split into (key, value) pairs."""
        pairs = []
        for header in self.headers:
            key, _, value = header.partition(":")
            pairs.append((key.strip(), value.strip()))
        return pairs


@dataclass
class Variable:
    """A value bound to a name within one environment."""

    id: int
    name: str
    env: str
    value: Optional[str] = None
    source: Optional[str] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Variable":
        """Convert SQLite row to Variable object."""
        return cls(
            id=row["id"],
            name=row["name"],
            env=row["env"],
            value=row["value"],
            source=row["source"],
            timestamp=row["timestamp"],
        )


@dataclass
class RequestOption:
    """An input option: a placeholder of a request and the value(s) to substitute."""

    request_name: str
    option_name: str
    value: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "RequestOption":
        """Convert SQLite row to RequestOption object."""
        return cls(
            request_name=row["request_name"],
            option_name=row["option_name"],
            value=row["value"],
        )


@dataclass
class Extraction:
    """An output option: copy part of a response into a variable."""

    request_name: str
    variable: str
    source: str
    path: str

    @classmethod
    def from_row(cls, row) -> "Extraction":
        """Convert SQLite row to Extraction object."""
        return cls(
            request_name=row["request_name"],
            variable=row["variable"],
            source=row["source"],
            path=row["path"],
        )


@dataclass
class Response:
    """
    One recorded exchange of a request run.

    Attributes:
        request_name: Stored request that was run
        method, url, request_headers, request_body: What was sent, with
            placeholders substituted
        status_code, reason, headers, body: What came back
        extractions: Variable name -> value saved from this response
    """

    request_name: str
    method: str
    url: str
    status_code: int
    reason: str = ""
    request_headers: List[str] = field(default_factory=list)
    request_body: Optional[bytes] = None
    headers: List[str] = field(default_factory=list)
    body: str = ""
    extractions: Dict[str, str] = field(default_factory=dict)
    id: Optional[int] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Response":
        """Convert SQLite row to Response object."""
        return cls(
            id=row["id"],
            request_name=row["request_name"],
            method=row["method"],
            url=row["url"],
            status_code=row["status_code"],
            reason=row["reason"] or "",
            request_headers=_split_lines(row["request_headers"]),
            request_body=row["request_body"],
            headers=_split_lines(row["headers"]),
            body=row["body"] or "",
            extractions=json.loads(row["extractions"] or "{}"),
            timestamp=row["timestamp"],
        )
