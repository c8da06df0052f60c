import re
import secrets
import string

# URL-safe alphabet, matches the redirect route pattern
ALPHABET = string.ascii_letters + string.digits + "_-"

SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
HTTP_PREFIX = re.compile(r"^https?://", re.IGNORECASE)

def generate_random_code(length: int = 8) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))

def has_scheme(url: str) -> bool:
    return SCHEME_PREFIX.match(url) is not None

def normalize_target_url(url: str) -> str:
    if HTTP_PREFIX.match(url):
        return url
    return f"https://{url}"
