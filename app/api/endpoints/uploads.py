from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.services import auth_service
from app.services.storage_service import LocalImageStorage
from app.models import user as user_model
from app.api.dependencies import get_storage

router = APIRouter()

@router.post("/upload-image")
async def upload_image_endpoint(
    file: Optional[UploadFile] = File(None),
    folder: str = Form("uploads"),
    storage: LocalImageStorage = Depends(get_storage),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    # One byte past the limit is enough to reject an oversized upload
    data = await file.read(storage.max_bytes + 1)
    stored = storage.save_image(data, file.content_type, folder or "uploads")
    return {"success": True, "url": stored.url, "path": stored.path}
