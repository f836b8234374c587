"""
Newsletter Module - Routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.newsletter.service import newsletter_service

router = APIRouter(prefix="/api", tags=["newsletter"])


@router.post("/newsletter")
async def subscribe(body: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    result = newsletter_service.subscribe(db, body.get("email"))
    return JSONResponse(result.as_response(), status_code=result.status_code)
