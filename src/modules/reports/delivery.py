"""
Hand encoded documents to the caller: save into the export directory, or
fall back to an inline data URI where the format allows it.
"""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path

from src.core.exceptions import ExportError, NotFoundError
from src.modules.reports import csv_export
from src.modules.reports.tables import RenderedDocument, ReportTable

logger = logging.getLogger(__name__)

FILES_URL_PREFIX = "/api/v1/reports/files"


@dataclass
class DeliveredFile:
    filename: str
    media_type: str
    size: int
    strategy: str
    disposition: str
    url: str


class ReportDelivery:
    """Writes documents under export_dir and resolves them for download."""

    def __init__(self, export_dir: str | Path) -> None:
        self.export_dir = Path(export_dir)

    def deliver(self, documents: list[tuple[ReportTable, RenderedDocument]]) -> list[DeliveredFile]:
        """
        Save every document. A PDF or CSV that cannot be saved is returned as
        an inline data URI instead; any other failure removes the files this
        call already wrote and raises ExportError.
        """
        saved: list[Path] = []
        delivered: list[DeliveredFile] = []
        try:
            for table, document in documents:
                delivered.append(self._deliver_one(table, document, saved))
        except Exception:
            self._cleanup(saved)
            raise
        return delivered

    def _deliver_one(
        self, table: ReportTable, document: RenderedDocument, saved: list[Path]
    ) -> DeliveredFile:
        try:
            path = self._save(document)
        except OSError as e:
            fallback_url = self._inline_url(table, document)
            if fallback_url is None:
                raise ExportError(_format_label(document), str(e)) from e
            logger.warning("Could not save %s (%s); returning it inline", document.filename, e)
            return DeliveredFile(
                filename=document.filename,
                media_type=document.media_type,
                size=document.size,
                strategy=document.strategy,
                disposition="inline",
                url=fallback_url,
            )
        saved.append(path)
        logger.info("Saved %s (%d bytes)", path, document.size)
        return DeliveredFile(
            filename=document.filename,
            media_type=document.media_type,
            size=document.size,
            strategy=document.strategy,
            disposition="attachment",
            url=f"{FILES_URL_PREFIX}/{document.filename}",
        )

    def _save(self, document: RenderedDocument) -> Path:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / document.filename
        path.write_bytes(document.content)
        return path

    def _inline_url(self, table: ReportTable, document: RenderedDocument) -> str | None:
        if document.media_type == "application/pdf":
            encoded = base64.b64encode(document.content).decode("ascii")
            return f"data:application/pdf;base64,{encoded}"
        if document.media_type == csv_export.MEDIA_TYPE:
            return document.data_uri or csv_export.csv_data_uri(csv_export.manual_csv(table))
        return None

    def _cleanup(self, paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Could not remove partial export %s: %s", path, e)

    def resolve(self, filename: str) -> Path:
        """Path of a previously saved file; anything outside export_dir is not found."""
        root = self.export_dir.resolve()
        path = (root / filename).resolve()
        if path.parent != root or not path.is_file():
            raise NotFoundError("Report file", filename)
        return path


def _format_label(document: RenderedDocument) -> str:
    suffix = Path(document.filename).suffix.lower()
    return {".xlsx": "Excel", ".pdf": "PDF", ".csv": "CSV"}.get(suffix, suffix.lstrip(".").upper())
