from __future__ import annotations

import strawberry
from strawberry.schema_directive import Location


@strawberry.schema_directive(
    locations=[Location.FIELD_DEFINITION],
    name="needsResolve",
    description="Field must be computed by a resolver before nodes can be filtered or sorted on it.",
)
class NeedsResolve:
    """Marks a strawberry field as needing resolution.

    Example:
        @strawberry.type
        class Post(Node):
            title: str
            excerpt: Optional[str] = strawberry.field(directives=[NeedsResolve()])
    """
