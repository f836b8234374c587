"""
Review Service - Business Logic
==================================
Approved reviews and rating summary for the product page.
"""

import logging
from typing import Dict, Any

from sqlalchemy.orm import Session

from config.settings import CACHE_TTL_REVIEWS
from common.cache import cache
from modules.review.models import Review

logger = logging.getLogger("walldecorator.review")

RECENT_REVIEWS_LIMIT = 10


class ReviewService:

    def get_product_reviews(self, db: Session, product_id: str) -> Dict[str, Any]:
        """Ten most recent approved reviews plus {total_count, average_rating, distribution}."""
        def load():
            approved = db.query(Review).filter(
                Review.product_id == product_id,
                Review.is_approved == True,
            )
            recent = approved.order_by(Review.created_at.desc()).limit(RECENT_REVIEWS_LIMIT).all()
            ratings = [r.rating for r in approved.with_entities(Review.rating).all()]

            total = len(ratings)
            average = sum(ratings) / total if total else 0
            return {
                "reviews": [{
                    "id": r.id,
                    "rating": r.rating,
                    "title": r.title,
                    "body": r.body,
                    "created_at": r.created_at.isoformat() if r.created_at else None,
                    "profile": {"display_name": r.display_name or "Customer"},
                } for r in recent],
                "summary": {
                    "total_count": total,
                    "average_rating": round(average, 2),
                    "distribution": [
                        {"star": star, "count": ratings.count(star)} for star in (5, 4, 3, 2, 1)
                    ],
                },
            }
        return cache.get_or_set(f"product:{product_id}:reviews", CACHE_TTL_REVIEWS, load)


# Singleton
review_service = ReviewService()
