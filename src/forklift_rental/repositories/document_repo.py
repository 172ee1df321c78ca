"""Repository for generated documents persistence."""

from __future__ import annotations

import sqlite3
from typing import Optional

from forklift_rental.domain.models import Document, DocumentType
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import document_from_row


class DocumentRepository:
    """Data access for generated notices and reports."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def add(self, document: Document) -> Document:
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO documents (
                    contract_id,
                    doc_type,
                    file_path,
                    generated_at,
                    checksum
                )
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    document.contract_id,
                    document.doc_type.value,
                    document.file_path,
                    document.generated_at,
                    document.checksum,
                ),
            )
        except Exception:
            self._logger.exception(
                "Failed to insert document contract_id=%s type=%s",
                document.contract_id,
                document.doc_type,
            )
            raise
        return Document(
            id=int(cursor.lastrowid) if cursor.lastrowid else None,
            contract_id=document.contract_id,
            doc_type=document.doc_type,
            file_path=document.file_path,
            generated_at=document.generated_at,
            checksum=document.checksum,
        )

    def get_latest(
        self,
        contract_id: str,
        doc_type: DocumentType,
    ) -> Optional[Document]:
        try:
            row = self._connection.execute(
                """
                SELECT *
                FROM documents
                WHERE contract_id = ?
                  AND doc_type = ?
                ORDER BY generated_at DESC, id DESC
                LIMIT 1
                """,
                (contract_id, doc_type.value),
            ).fetchone()
        except Exception:
            self._logger.exception(
                "Failed to fetch latest document contract_id=%s type=%s",
                contract_id,
                doc_type,
            )
            raise
        return document_from_row(row) if row else None

    def list_by_contract(self, contract_id: str) -> list[Document]:
        try:
            rows = self._connection.execute(
                """
                SELECT *
                FROM documents
                WHERE contract_id = ?
                ORDER BY generated_at, id
                """,
                (contract_id,),
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list documents contract_id=%s", contract_id
            )
            raise
        return [document_from_row(row) for row in rows]
