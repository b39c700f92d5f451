import re
from typing import Iterable, Optional

from container_health.domain.container import ContainerIdentity

UNKNOWN_CLIENT = "Unknown"

# https://acme.example.com/webhook -> "acme"
WEBHOOK_URL = re.compile(r"\b[a-zA-Z][a-zA-Z0-9+.-]*://([^./\s:@'\"]+)\.[^\s'\"]+")

# chatId: '5511999999999@c.us'
SESSION_TAG = re.compile(r"chatId:\s*['\"](\d+)@c\.us['\"]")


def extract_client(lines: Iterable[str]) -> str:
    """Capitalized subdomain of the first URL found, or "Unknown"."""
    for line in lines:
        match = WEBHOOK_URL.search(line)
        if match:
            subdomain = match.group(1)
            return subdomain[:1].upper() + subdomain[1:]
    return UNKNOWN_CLIENT


def extract_session_id(lines: Iterable[str]) -> Optional[str]:
    for line in lines:
        match = SESSION_TAG.search(line)
        if match:
            return match.group(1)
    return None


def extract_identity(lines: Iterable[str]) -> ContainerIdentity:
    lines = tuple(lines)
    return ContainerIdentity(
        client=extract_client(lines),
        session_id=extract_session_id(lines),
    )
