from functools import lru_cache
import os

MIN_CSRF_TOKEN_BYTES = 16


def parse_filter_list(raw: str | None) -> list[str]:
    """Split a comma-separated filter list, dropping blanks."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("true", "1", "yes")


@lru_cache()
def load_security_config() -> dict:
    """Build the security manager configuration from the environment."""
    raw_bytes = os.getenv("SECURITY_CSRF_TOKEN_BYTES", "32")

    # Validation: token size must be an integer of at least 16 bytes
    try:
        csrf_token_bytes = int(raw_bytes)
    except ValueError:
        raise ValueError(f"Invalid SECURITY_CSRF_TOKEN_BYTES: {raw_bytes}. Must be an integer")
    if csrf_token_bytes < MIN_CSRF_TOKEN_BYTES:
        raise ValueError(
            f"Invalid SECURITY_CSRF_TOKEN_BYTES: {raw_bytes}. "
            f"Must be at least {MIN_CSRF_TOKEN_BYTES}"
        )

    return {
        "uri_filter": parse_filter_list(os.getenv("SECURITY_URI_FILTER")),
        "input_filter": parse_filter_list(os.getenv("SECURITY_INPUT_FILTER")),
        "output_filter": parse_filter_list(os.getenv("SECURITY_OUTPUT_FILTER")),
        "uri_strict": _env_flag("SECURITY_URI_STRICT"),
        "csrf_token_bytes": csrf_token_bytes,
    }
