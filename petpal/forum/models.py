from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PostOrigin(str, Enum):
    REDDIT = "Reddit"
    COMMUNITY = "Community"


@dataclass(frozen=True)
class Post:
    """A forum post in the shape the PetPal feed renders. Every field is always set."""
    title: str
    body: str
    created_at: datetime     # timezone-aware, UTC
    author: str
    source_group: str        # subreddit (or community category) the post belongs to
    has_image: bool
    origin: PostOrigin = PostOrigin.REDDIT

    def to_api_dict(self) -> dict:
        """Render the JSON shape the mobile client consumes."""
        return {
            "title": self.title,
            "selftext": self.body,
            "created_utc": self.created_at.timestamp(),
            "author": self.author,
            "subreddit": self.source_group,
            "hasImage": self.has_image,
            "source": self.origin.value,
        }
