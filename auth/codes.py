"""Six-digit verification codes."""

import hmac
import secrets

CODE_MIN = 100000
CODE_MAX = 999999


def generate_verification_code() -> str:
    """Uniformly random code in [100000, 999999], always six characters."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def codes_match(submitted: str, stored: str | None) -> bool:
    """Constant-time comparison. A missing stored code never matches."""
    if stored is None:
        return False
    return hmac.compare_digest(submitted.encode("utf-8"), stored.encode("utf-8"))
