import re
import secrets
import string


def slugify(value: str) -> str:
    """
    Build a URL slug used for catalog entries.

    "Web Development!" -> "web-development"
    """
    slug = value.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug)
    return slug


def course_slug(title: str) -> str:
    """Course slugs replace every run of non-alphanumerics with a single dash."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    return slug.strip("-")


def with_suffix(base_slug: str, counter: int) -> str:
    return base_slug if counter == 0 else f"{base_slug}-{counter}"


def random_password(length: int = 16) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def random_token() -> str:
    return secrets.token_hex(32)
