"""
Standardized pagination parameters for consistent API pagination.
"""

from typing import Annotated

from fastapi import Query

# Standard pagination for most list endpoints
PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Pagination for moderation queues (admin panels)
PaginationLimitLarge = Annotated[
    int, Query(ge=1, le=200, description="Maximum number of records to return")
]
