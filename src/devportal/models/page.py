"""
Page envelope models for the upstream paged list endpoints.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """Metadata block of one upstream page."""

    model_config = ConfigDict(extra='allow')

    total_count: Annotated[Optional[int], Field(
        default=None,
        description='Total number of records matching the query',
        examples=[1200]
    )] = None

    limit: Annotated[Optional[int], Field(
        default=None,
        description='Page size used by the upstream',
        examples=[500]
    )] = None

    offset: Annotated[Optional[int], Field(
        default=None,
        description='Offset of the first record on this page',
        examples=[0]
    )] = None

    @property
    def is_paginated(self) -> bool:
        """Whether the page carries enough information to compute further pages."""
        return bool(self.total_count) and bool(self.limit) and self.limit > 0
