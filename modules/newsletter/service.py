"""
Newsletter Module - Service Layer
====================================
Footer / homepage signup. One row per (lower-cased) email address.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from common.exceptions import is_unique_violation
from common.helpers import is_valid_email
from modules.newsletter.models import NewsletterSubscriber

logger = logging.getLogger("walldecorator.newsletter")


@dataclass
class NewsletterResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    already_subscribed: bool = False

    @property
    def status_code(self) -> int:
        if self.success:
            return 200
        return 409 if self.already_subscribed else 400

    def as_response(self) -> dict:
        if self.success:
            return {"success": True, "message": self.message}
        return {"success": False, "error": self.error}


class NewsletterService:

    def subscribe(self, db: Session, email: str) -> NewsletterResult:
        if not email or not isinstance(email, str):
            return NewsletterResult(success=False, error="Email is required")
        if not is_valid_email(email):
            return NewsletterResult(success=False, error="Please enter a valid email address")

        normalized = email.lower().strip()
        try:
            db.add(NewsletterSubscriber(email=normalized))
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_unique_violation(e):
                return NewsletterResult(
                    success=False, error="This email is already subscribed", already_subscribed=True,
                )
            logger.error(f"Newsletter subscription error: {e}")
            return NewsletterResult(success=False, error="Failed to subscribe. Please try again.")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Newsletter subscription error: {e}")
            return NewsletterResult(success=False, error="An unexpected error occurred. Please try again.")

        logger.info(f"Newsletter subscriber added: {normalized}")
        return NewsletterResult(
            success=True,
            message="Successfully subscribed! Check your inbox for your discount code.",
        )


# Singleton
newsletter_service = NewsletterService()
