from __future__ import annotations

import secrets
from typing import Dict

SECRET_LENGTH = 64

_ALPHABET = "1234567890abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

DEFAULT_CONF = """[System]
Mode = master
Listen = :5212
SessionSecret = {SessionSecret}
HashIDSalt = {HashIDSalt}
"""


def rand_string(n: int) -> str:
    """Return ``n`` random alphanumeric characters."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(n))


def render_template(replacements: Dict[str, str], template: str) -> str:
    for placeholder, value in replacements.items():
        template = template.replace(placeholder, value)
    return template


def default_content() -> str:
    """Starter configuration written when no file exists yet."""
    return render_template(
        {
            "{SessionSecret}": rand_string(SECRET_LENGTH),
            "{HashIDSalt}": rand_string(SECRET_LENGTH),
        },
        DEFAULT_CONF,
    )
