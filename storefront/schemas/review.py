from typing import Dict, Optional
from pydantic import BaseModel, Field, field_validator


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=1000)

    @field_validator("review_text")
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None


class ReviewUpdate(ReviewCreate):
    pass


class ReviewStats(BaseModel):
    total_reviews: int = 0
    average_rating: float = 0.0
    # Keyed by star value, 1..5
    rating_counts: Dict[int, int] = Field(default_factory=lambda: {star: 0 for star in range(1, 6)})

    @property
    def five_star_count(self) -> int:
        return self.rating_counts.get(5, 0)

    @property
    def four_star_count(self) -> int:
        return self.rating_counts.get(4, 0)

    @property
    def three_star_count(self) -> int:
        return self.rating_counts.get(3, 0)

    @property
    def two_star_count(self) -> int:
        return self.rating_counts.get(2, 0)

    @property
    def one_star_count(self) -> int:
        return self.rating_counts.get(1, 0)

    def percentage(self, count: int) -> float:
        return (count / self.total_reviews) * 100 if self.total_reviews > 0 else 0.0
