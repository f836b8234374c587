"""
Custom Order Module - Routes
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import WallDecoratorError
from common.upload import read_image_upload
from modules.custom_order.schemas import CustomOrderForm
from modules.custom_order.service import custom_order_service

router = APIRouter(prefix="/api/custom-orders", tags=["custom-order"])


@router.post("/upload")
async def upload_reference_image(file: UploadFile = File(...)):
    try:
        data, ext = read_image_upload(file)
    except WallDecoratorError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=e.status_code)
    result = custom_order_service.upload_image(data, ext)
    return JSONResponse(result.as_response(), status_code=result.status_code)


@router.post("")
async def submit_custom_order(form: CustomOrderForm, db: Session = Depends(get_db)):
    result = custom_order_service.submit(db, form)
    return JSONResponse(result.as_response(), status_code=result.status_code)
