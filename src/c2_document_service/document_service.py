"""Service layer for the per-user document library."""

import asyncio
import re
import time
import random
import logging
from pathlib import Path
from typing import List, Optional, Dict, Any, Tuple

from src.core.config import get_settings
from src.core.database import get_db, Document
from src.core.errors import NotFoundError, PermissionDeniedError, UnsupportedMediaTypeError
from src.core.time_utils import to_iso
from src.c2_document_service.virus_scanner import VirusScanner

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def document_to_dict(document: Document) -> Dict[str, Any]:
    return {
        "id": document.id,
        "user_id": document.user_id,
        "title": document.title,
        "filename": document.filename,
        "file_type": document.file_type,
        "size": document.size,
        "url": document.url,
        "category": document.category,
        "created_at": to_iso(document.created_at),
    }


def unique_filename(original_name: str) -> str:
    """``<millis>-<random>-<sanitized original name>``."""
    base = _UNSAFE_FILENAME_CHARS.sub("_", Path(original_name).name).strip("._") or "file"
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{base}"


class DocumentService:
    """Upload, list, download and delete documents."""

    @staticmethod
    def _documents_dir() -> Path:
        path = Path(get_settings().upload.uploads_dir) / "documents"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def validate_upload(filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """
        Check an upload against the allow-lists and the size limit.

        Raises:
            ValueError: Missing file or file too large
            UnsupportedMediaTypeError: MIME type or extension not allowed
        """
        config = get_settings().upload
        if not filename or size == 0:
            raise ValueError("No file uploaded")
        if size > config.max_document_size:
            raise ValueError(
                f"File too large. Maximum size is {config.max_document_size // (1024 * 1024)}MB"
            )
        if content_type not in config.allowed_document_types:
            raise UnsupportedMediaTypeError(
                f"File type not allowed: {content_type}. Use PDF, Word, Excel, PowerPoint, images or ZIP."
            )
        extension = Path(filename).suffix.lower()
        if extension not in config.allowed_document_extensions:
            raise UnsupportedMediaTypeError(
                f"File extension not allowed: {extension or '(none)'}. "
                f"Use: {', '.join(config.allowed_document_extensions)}"
            )

    @staticmethod
    async def upload_document(
        user_id: int,
        content: bytes,
        original_name: Optional[str],
        content_type: Optional[str],
        category: Optional[str] = None,
        scanner: Optional[VirusScanner] = None,
    ) -> Dict[str, Any]:
        """Store an uploaded file, scan it and record it for ``user_id``."""
        DocumentService.validate_upload(original_name, content_type, len(content or b""))

        filename = unique_filename(original_name)
        path = DocumentService._documents_dir() / filename
        path.write_bytes(content)

        scanner = scanner or VirusScanner.from_settings()
        result = await asyncio.to_thread(scanner.scan_file, path)
        if not result.clean:
            path.unlink(missing_ok=True)
            logger.warning(f"Infected upload rejected: {filename} ({result.message})")
            raise ValueError("File rejected for security reasons")

        try:
            with get_db() as db:
                document = Document(
                    user_id=user_id,
                    title=Path(original_name).name,
                    filename=filename,
                    file_type=content_type,
                    size=len(content),
                    url="",
                    category=category or None,
                )
                db.add(document)
                db.flush()
                document.url = f"/api/documents/{document.id}/download"
                db.flush()
                data = document_to_dict(document)
        except Exception:
            path.unlink(missing_ok=True)
            raise

        logger.info(f"Document {data['id']} uploaded by user {user_id}: {filename} ({len(content)} bytes)")
        return data

    @staticmethod
    async def list_documents(user_id: int) -> List[Dict[str, Any]]:
        """Documents owned by ``user_id``, newest first."""
        with get_db() as db:
            documents = (
                db.query(Document)
                .filter(Document.user_id == user_id)
                .order_by(Document.created_at.desc(), Document.id.desc())
                .all()
            )
            return [document_to_dict(d) for d in documents]

    @staticmethod
    def _owned_document(db, document_id: int, user_id: int) -> Document:
        document = db.query(Document).filter(Document.id == document_id).first()
        if not document:
            raise NotFoundError("Document not found")
        if document.user_id != user_id:
            raise PermissionDeniedError("Access denied")
        return document

    @staticmethod
    async def get_document_file(document_id: int, user_id: int) -> Tuple[Path, str, str]:
        """Path, download name and MIME type of an owned document."""
        with get_db() as db:
            document = DocumentService._owned_document(db, document_id, user_id)
            path = DocumentService._documents_dir() / document.filename
            title, file_type = document.title, document.file_type

        if not path.is_file():
            raise NotFoundError("Stored file not found")
        return path, title, file_type

    @staticmethod
    async def delete_document(document_id: int, user_id: int) -> None:
        with get_db() as db:
            document = DocumentService._owned_document(db, document_id, user_id)
            filename = document.filename
            db.delete(document)

        path = DocumentService._documents_dir() / filename
        if path.exists():
            path.unlink()
        logger.info(f"Document {document_id} deleted by user {user_id}")
