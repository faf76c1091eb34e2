"""Core data models shared by the aggregation handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Business:
    """The business an analysis request is made for."""

    name: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    website: Optional[str] = None
    industry: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "address": self.address}


@dataclass(slots=True)
class Competitor:
    """Normalized snapshot of a nearby business returned by Places nearby search."""

    name: str
    place_id: str
    address: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    business_type: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "placeId": self.place_id,
            "phone": self.phone,
            "website": self.website,
            "businessType": self.business_type,
        }


@dataclass(slots=True)
class Review:
    author: str
    rating: Optional[float]
    text: str
    time: Optional[str]
    time_relative: Optional[str] = None
    profile_photo_url: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "author": self.author,
            "rating": self.rating,
            "text": self.text,
            "time": self.time,
            "timeRelative": self.time_relative,
            "profilePhotoUrl": self.profile_photo_url,
        }


@dataclass(slots=True)
class PlaceReviews:
    """Review summary for one place id."""

    business_name: Optional[str]
    place_id: str
    rating: Optional[float] = None
    review_count: Optional[int] = None
    reviews: List[Review] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "businessName": self.business_name,
            "placeId": self.place_id,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "reviews": [review.to_payload() for review in self.reviews],
        }


@dataclass(slots=True)
class SocialProfile:
    """A social account as submitted by the caller, plus the resolved follower count.

    ``extra`` keeps any caller-supplied keys so they round-trip unchanged.
    """

    platform: str
    url: Optional[str] = None
    followers: Optional[int] = None
    verified: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "SocialProfile":
        known = {"platform", "url", "followers", "verified"}
        followers = raw.get("followers")
        return cls(
            platform=str(raw.get("platform") or "unknown"),
            url=raw.get("url") or None,
            followers=followers if isinstance(followers, int) and not isinstance(followers, bool) else None,
            verified=bool(raw.get("verified", False)),
            extra={k: v for k, v in raw.items() if k not in known},
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update(
            {
                "platform": self.platform,
                "url": self.url,
                "followers": self.followers,
                "verified": self.verified,
            }
        )
        return payload


@dataclass(slots=True)
class ScoreBreakdown:
    category: str
    score: int
    explanation: Optional[str] = None
