"""JSON field naming for the audit API.

The web form posts ``otherBanner`` and reads ``details`` back, so the
request and result models alias their snake_case fields to camelCase
through :func:`snake_to_camel`.
"""

from __future__ import annotations


def snake_to_camel(name: str) -> str:
    """Return the camelCase wire name for a model field, e.g. ``other_banner`` -> ``otherBanner``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)
