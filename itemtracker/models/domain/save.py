"""Save directory models."""

from pydantic import BaseModel, Field


class SaveSnapshot(BaseModel):
    """Items currently present across every readable file of one save."""

    save_path: str
    items: set[str] = Field(default_factory=set)
    scanned_files: list[str] = Field(default_factory=list)
    skipped_files: list[str] = Field(default_factory=list)
    latest_modified_at: int | None = None


class SaveCandidate(BaseModel):
    """A world directory found under the saves root."""

    name: str
    path: str
    modified_at: int
