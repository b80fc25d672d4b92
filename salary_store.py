"""
Salary settings storage.

Records are stored in JSON form (Decimals as strings) so that reading a record
back reproduces the saved percentages exactly.
"""
import logging
from typing import Dict, Optional

from config import Config
from schemas import SalaryInfoRecord

logger = logging.getLogger(__name__)


class MemorySalaryStore:
    """Process-local store used when no database is configured."""

    def __init__(self):
        self._records: Dict[str, dict] = {}

    def get(self, employee_id: str) -> Optional[SalaryInfoRecord]:
        document = self._records.get(employee_id)
        if document is None:
            return None
        return SalaryInfoRecord(**document)

    def save(self, record: SalaryInfoRecord) -> SalaryInfoRecord:
        self._records[record.employee_id] = record.model_dump(mode='json')
        return record


class MongoSalaryStore:
    """One document per employee, upserted on save."""

    def __init__(self, db, collection_name: str = Config.SALARY_COLLECTION):
        self.collection = db[collection_name]

    def get(self, employee_id: str) -> Optional[SalaryInfoRecord]:
        document = self.collection.find_one({'employee_id': employee_id}, {'_id': 0})
        if document is None:
            return None
        return SalaryInfoRecord(**document)

    def save(self, record: SalaryInfoRecord) -> SalaryInfoRecord:
        self.collection.replace_one(
            {'employee_id': record.employee_id},
            record.model_dump(mode='json'),
            upsert=True,
        )
        return record


_store = None


def get_salary_store():
    """Return the configured store, creating it on first use."""
    global _store
    if _store is None:
        from database import db

        if db is not None:
            _store = MongoSalaryStore(db)
            logger.info("Salary records stored in MongoDB")
        else:
            _store = MemorySalaryStore()
            logger.info("DATABASE_URL not set, salary records kept in memory")
    return _store
