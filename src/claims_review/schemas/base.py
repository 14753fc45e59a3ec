"""Shared pydantic base model — snake_case in Python, camelCase on the wire."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every schema exchanged with the dashboard.

    Fields are declared in snake_case and serialised with camelCase aliases
    (``claim_number`` → ``claimNumber``).  Both spellings are accepted on
    input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
