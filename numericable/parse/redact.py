"""Redaction module to mask secrets in logs."""
import re
from typing import Any, Dict

SECRET_KEYS = ("appkey", "accesstoken", "access_token", "pwd", "password")

_PATTERNS = [
    (r'(appkey["\']?\s*[:=]\s*["\']?)([^"\'&\s,;]+)', r"\1[REDACTED]"),
    (r'(accessToken["\']?\s*[:=]\s*["\']?)([^"\'&\s,;]+)', r"\1[REDACTED]"),
    (r'(pwd["\']?\s*[:=]\s*["\']?)([^"\'&\s,;]+)', r"\1[REDACTED]"),
    (r'(password["\']?\s*[:=]\s*["\']?)([^"\'&\s,;]+)', r"\1[REDACTED]"),
    (r"(ASP\.NET_SessionId=)([^;,\s]+)", r"\1[REDACTED]"),
    (r"(PHPSESSID=)([^;,\s]+)", r"\1[REDACTED]"),
]


def redact_string(text: str) -> str:
    """Redact secrets from a string."""
    if not text:
        return text

    result = text
    for pattern, replacement in _PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result


def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact secrets from a dictionary."""
    if not isinstance(data, dict):
        return data

    redacted = {}
    for key, value in data.items():
        if key.lower() in SECRET_KEYS:
            redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_dict(value)
        elif isinstance(value, str):
            redacted[key] = redact_string(value)
        else:
            redacted[key] = value
    return redacted
