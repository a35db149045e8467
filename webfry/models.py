"""Response shapes returned by the Webfry API.

These are typing aids only; responses are not validated at runtime.
"""

from __future__ import annotations

from typing import List, Optional, TypedDict


class ApiKeyResponse(TypedDict):
    api_key: str


class UserInfoResponse(TypedDict):
    email: str
    paid_until: Optional[str]
    # "starter", "pro", "enterprise" or a newer plan name
    plan: str
    api_usage: int
    max_usage_for_plan: Optional[int]
    created_at: str


class _StrengthResultBase(TypedDict):
    score: int
    label: str
    feedback: List[str]


class StrengthResult(_StrengthResultBase, total=False):
    length: int
    entropy: float
    charset_size: int
    estimated_crack_time: str


class _HashResultBase(TypedDict):
    hash: str
    found: bool


class HashResult(_HashResultBase, total=False):
    plaintext: Optional[str]
    type: Optional[str]


class HashSummary(TypedDict):
    total_searched: int
    total_found: int
    success_rate: float


class HashLookupOutput(TypedDict):
    results: List[HashResult]
    summary: HashSummary


class HashGeneratorResponse(TypedDict):
    algorithm: str
    hash: str


class _Base64ResponseBase(TypedDict):
    answer: str


class Base64Response(_Base64ResponseBase, total=False):
    error: Optional[str]


class EntropyResponse(TypedDict):
    entropy: float
    estimate_brute_force: str


class HashIdentifierResponse(TypedDict):
    estimate: str


class GenerateRandomKeyResponse(TypedDict):
    random_key: str


class JwtResponse(TypedDict):
    answer: str
    error: str


class CryptoResponse(TypedDict):
    result: str
    error: str


class JsonResponse(TypedDict):
    result: str
    error: str


class PasswordResponse(TypedDict):
    is_common: bool


__all__ = [
    "ApiKeyResponse",
    "Base64Response",
    "CryptoResponse",
    "EntropyResponse",
    "GenerateRandomKeyResponse",
    "HashGeneratorResponse",
    "HashIdentifierResponse",
    "HashLookupOutput",
    "HashResult",
    "HashSummary",
    "JsonResponse",
    "JwtResponse",
    "PasswordResponse",
    "StrengthResult",
    "UserInfoResponse",
]
