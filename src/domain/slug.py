"""
Tenant slug rules.
"""

import re

from src.domain.errors import ValidationError

RESERVED_SLUGS = frozenset(
    {
        "admin", "api", "auth", "login", "logout", "register",
        "signup", "signin", "dashboard", "settings", "billing",
        "docs", "help", "support", "public", "static", "assets",
        "app", "www", "mail", "cdn", "images", "files",
    }
)

SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 50
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def normalize_slug(slug: str) -> str:
    return slug.strip().lower()


def validate_slug(slug: str) -> str:
    """Return the normalized slug or raise ValidationError"""
    slug = normalize_slug(slug)

    if len(slug) < SLUG_MIN_LENGTH:
        raise ValidationError(
            "INVALID_SLUG", f"Slug must be at least {SLUG_MIN_LENGTH} characters"
        )
    if len(slug) > SLUG_MAX_LENGTH:
        raise ValidationError(
            "INVALID_SLUG", f"Slug must not exceed {SLUG_MAX_LENGTH} characters"
        )
    if not _SLUG_PATTERN.match(slug):
        raise ValidationError(
            "INVALID_SLUG", "Slug must be lowercase alphanumeric with hyphens"
        )
    if slug in RESERVED_SLUGS:
        raise ValidationError(
            "SLUG_RESERVED", f'"{slug}" is a reserved keyword and cannot be used'
        )
    return slug
