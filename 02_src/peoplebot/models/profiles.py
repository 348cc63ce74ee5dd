"""People-search result models."""

from dataclasses import dataclass
from typing import Any

# Flat key/value criteria passed to the people-search service.
SearchCriteria = dict[str, Any]


@dataclass(frozen=True)
class Profile:
    """A person found by the people-search service."""

    title: str
    profile_url: str
    image_url: str | None = None
    details: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Build from a search record ({title, imageURL, details, profileURL})."""
        return cls(
            title=str(data.get("title", "")),
            profile_url=str(data.get("profileURL") or data.get("profile_url") or ""),
            image_url=data.get("imageURL") or data.get("image_url"),
            details=data.get("details"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "imageURL": self.image_url,
            "details": self.details,
            "profileURL": self.profile_url,
        }
