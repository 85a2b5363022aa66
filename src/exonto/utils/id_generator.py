import hashlib
from typing import Iterable, Union

IdInput = Union[str, Iterable[str]]


def _prepare(value: IdInput, normalize: bool) -> str:
    if not isinstance(value, str):
        value = ":".join(str(v) for v in value)
    if normalize:
        value = value.strip().lower()
    return value


def generate_id(value: IdInput, length: int = 12, normalize: bool = False) -> str:
    """
    Deterministic hex identifier (SHA-256, truncated).

    Lists are joined with ":" before hashing so that `["a", "b"]` and `"a:b"` agree.
    """
    digest = hashlib.sha256(_prepare(value, normalize).encode("utf-8")).hexdigest()
    return digest[:length]


def short_id(value: IdInput) -> str:
    return generate_id(value, length=8)


def agent_id(email: str) -> str:
    # Emails differ only by case/whitespace across commits.
    return generate_id(email, length=12, normalize=True)


def content_id(content: IdInput) -> str:
    return generate_id(content, length=16)


def full_hash(value: IdInput) -> str:
    return generate_id(value, length=64)
