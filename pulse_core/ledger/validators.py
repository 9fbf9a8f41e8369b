# pulse_core/ledger/validators.py
from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

# Server-relative file reference, e.g. "/uploads/1700000000-report.pdf"
_RELATIVE_REF = re.compile(r"^/[^\s/][^\s]*$")

_absolute_url = URLValidator(schemes=["http", "https"])


def validate_attachment_link(value: str) -> None:
    """Accept an absolute http(s) URL or a server-relative path."""
    if _RELATIVE_REF.match(value):
        return
    try:
        _absolute_url(value)
    except ValidationError:
        raise ValidationError(
            "Enter an http(s) URL or a server-relative file path such as /uploads/report.pdf.",
            code="invalid_attachment",
        )
