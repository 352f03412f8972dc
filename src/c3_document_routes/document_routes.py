"""Document library routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from fastapi.responses import FileResponse

from src.auth import CurrentUser, get_current_user, upload_rate_limit
from src.c2_document_service import DocumentService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


def create_document_router():
    """Create the document router.

    Returns:
        APIRouter: Configured router with upload, list, download and delete endpoints
    """
    router = APIRouter(tags=["documents"])

    @router.post("/documents", status_code=201, dependencies=[Depends(upload_rate_limit)])
    async def upload_document(
        file: Optional[UploadFile] = File(None),
        category: Optional[str] = Form(None),
        current_user: CurrentUser = Depends(get_current_user),
    ):
        """Upload a document to the caller's library."""
        if file is None:
            raise HTTPException(status_code=400, detail="No file uploaded")
        try:
            content = await file.read()
            return await DocumentService.upload_document(
                current_user.id, content, file.filename, file.content_type, category
            )
        except Exception as e:
            raise http_error(e, "upload document")

    @router.get("/documents")
    async def list_documents(current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await DocumentService.list_documents(current_user.id)
        except Exception as e:
            raise http_error(e, "list documents")

    @router.get("/documents/{document_id}/download")
    async def download_document(document_id: int, current_user: CurrentUser = Depends(get_current_user)):
        try:
            path, title, file_type = await DocumentService.get_document_file(document_id, current_user.id)
        except Exception as e:
            raise http_error(e, "download document")
        return FileResponse(path, media_type=file_type, filename=title)

    @router.delete("/documents/{document_id}", status_code=204)
    async def delete_document(document_id: int, current_user: CurrentUser = Depends(get_current_user)):
        try:
            await DocumentService.delete_document(document_id, current_user.id)
        except Exception as e:
            raise http_error(e, "delete document")
        return Response(status_code=204)

    return router
