"""C2 Document Service - Document library with antivirus scanning."""
from src.c2_document_service.document_service import DocumentService
from src.c2_document_service.virus_scanner import VirusScanner, ScanResult
__all__ = ["DocumentService", "VirusScanner", "ScanResult"]
