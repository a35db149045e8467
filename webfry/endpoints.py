"""Endpoint table for the Webfry API.

Each operation maps to one path/method pair under the `/api` root. Adding an
endpoint means adding a row here and a thin method on `WebfryClient`.
"""

from __future__ import annotations

from typing import Dict, NamedTuple


class Endpoint(NamedTuple):
    path: str
    method: str = "POST"
    requires_auth: bool = True
    # Successful responses are returned as text instead of decoded JSON.
    raw_text: bool = False


ENDPOINTS: Dict[str, Endpoint] = {
    "get_api_key": Endpoint("/get_api_key", requires_auth=False),
    "rotate_api_key": Endpoint("/new_api_key"),
    "user_info": Endpoint("/user_info"),
    "password_check": Endpoint("/password_check"),
    "hash_lookup": Endpoint("/hash_lookup"),
    "hash_lookup_site": Endpoint("/hash_lookup_site", requires_auth=False),
    "hash_generator": Endpoint("/hash_generator"),
    "base64": Endpoint("/base64"),
    "entropy": Endpoint("/entropy"),
    "hash_identifier": Endpoint("/hash_identifier"),
    "generate_random_key": Endpoint("/generate_random_key"),
    "jwt_decoder": Endpoint("/jwt_decoder"),
    "secure_encrypt": Endpoint("/secure_encrypt"),
    "secure_decrypt": Endpoint("/secure_decrypt"),
    "json_format": Endpoint("/json_format"),
    "json_minify": Endpoint("/json_minify"),
    "common_password": Endpoint("/common_pwd"),
    "suggestion": Endpoint("/suggestion", raw_text=True),
    # Both exist upstream but are still behind a release gate.
    "ip_info": Endpoint("/ip_info"),
    "data_breach": Endpoint("/data_breach"),
}


__all__ = ["ENDPOINTS", "Endpoint"]
