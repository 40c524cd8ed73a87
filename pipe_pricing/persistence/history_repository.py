"""
Quote History — issued quotes, newest first, capped in length.
"""

from __future__ import annotations

import logging
import uuid

from pydantic import ValidationError

from pipe_pricing.models.schemas import CompanyInfo, HistoryEntry, Quote
from pipe_pricing.persistence.json_record import read_json, write_json
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "pipe_calc_history"


class HistoryRepository:
    def __init__(self, kv: KeyValueStore, limit: int = 50):
        self.kv = kv
        self.limit = limit

    def list(self) -> list[HistoryEntry]:
        raw = read_json(self.kv, HISTORY_KEY)
        if not isinstance(raw, list):
            return []
        entries: list[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except (ValidationError, OverflowError):
                logger.warning("Skipping malformed history entry")
        return entries

    def get(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self.list() if e.id == entry_id), None)

    def add(self, quote: Quote, company: CompanyInfo | None = None) -> HistoryEntry:
        company = company or CompanyInfo()
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            company_name=company.company_name,
            contact_person=company.contact_person,
            total_price=quote.total,
            selected_product_names=[line.name for line in quote.lines],
            quote=quote.model_dump(mode="json"),
        )
        entries = [entry] + self.list()
        self._save(entries[: self.limit])
        logger.info(f"Recorded quote {entry.id} in history ({quote.total_display})")
        return entry

    def delete(self, entry_id: str) -> None:
        entries = self.list()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) != len(entries):
            self._save(remaining)

    def _save(self, entries: list[HistoryEntry]) -> None:
        write_json(self.kv, HISTORY_KEY, [e.model_dump(mode="json", by_alias=True) for e in entries])
