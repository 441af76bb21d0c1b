"""Location occurrences extracted from source documents."""

from pydantic import BaseModel, Field


class LocationOccurrence(BaseModel, frozen=True):
    """A mention of a place name found in a document.

    Created by the extraction step before resolution runs. The resolver
    only reads it and hands it back on every candidate it produces.
    """

    text: str = Field(description="The place name exactly as extracted, unescaped.")
    position: int = Field(
        default=0,
        description="Where the mention was found in the source document. Passed through untouched.",
    )
