"""Film records returned by the catalog."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Film:
    """A film as served by the upstream catalog."""

    id: str
    title: str
    description: Optional[str] = None
    director: Optional[str] = None
    release_date: Optional[str] = None
    running_time: Optional[str] = None
    image: Optional[str] = None
    movie_banner: Optional[str] = None
    rt_score: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Film":
        """Build a Film from an upstream JSON object.

        Args:
            data: Decoded JSON object; unknown keys are ignored

        Returns:
            Parsed film

        Raises:
            ValueError: If the payload is not an object or lacks id/title
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a film object, got {type(data).__name__}")

        missing = [name for name in ("id", "title") if not data.get(name)]
        if missing:
            raise ValueError(f"Film payload missing {', '.join(missing)}")

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=data.get("description"),
            director=data.get("director"),
            release_date=data.get("release_date"),
            running_time=data.get("running_time"),
            image=data.get("image"),
            movie_banner=data.get("movie_banner"),
            rt_score=data.get("rt_score"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "director": self.director,
            "release_date": self.release_date,
            "running_time": self.running_time,
            "image": self.image,
            "movie_banner": self.movie_banner,
            "rt_score": self.rt_score,
        }
