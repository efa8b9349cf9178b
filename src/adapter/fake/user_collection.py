"""In-memory implementation of UserCollection for testing.

Emulates the parts of a pymongo collection the user repository touches:
equality filters, ``$set`` updates, ``ReturnDocument`` and the partial unique
indexes on ``email`` and ``userName`` (scoped to enabled documents). Errors
are raised as the real driver raises them.
"""

import copy

from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError
from pymongo.results import InsertManyResult, InsertOneResult

DUPLICATE_KEY_CODE = 11000


class FakeUserCollection:
    def __init__(
        self,
        unique_fields: tuple[str, ...] = ('email', 'userName'),
        partial_filter: dict | None = None,
    ):
        self.docs: dict[str, dict] = {}
        self.unique_fields = unique_fields
        self.partial_filter = {'enabled': True} if partial_filter is None else partial_filter
        # Raised by the next operation, then cleared
        self.next_error: PyMongoError | None = None
        self.calls: list[str] = []

    # ── helpers ──────────────────────────────────────────────

    def _check_injected_error(self, op: str) -> None:
        self.calls.append(op)
        if self.next_error is not None:
            error, self.next_error = self.next_error, None
            raise error

    @staticmethod
    def _matches(doc: dict, filter: dict) -> bool:
        return all(doc.get(key) == value for key, value in filter.items())

    def _collision(self, doc: dict, ignore_id: str | None = None) -> str | None:
        """Return the name of the unique field ``doc`` would violate, if any."""
        if not self._matches(doc, self.partial_filter):
            return None
        for existing in self.docs.values():
            if existing['_id'] == ignore_id or not self._matches(existing, self.partial_filter):
                continue
            for field in self.unique_fields:
                if field in doc and existing.get(field) == doc[field]:
                    return field
        return None

    @staticmethod
    def _duplicate_message(field: str, value) -> str:
        return f"E11000 duplicate key error collection: users index: {field}_1 dup key: {{ {field}: \"{value}\" }}"

    # ── write operations ─────────────────────────────────────

    def insert_one(self, document: dict) -> InsertOneResult:
        self._check_injected_error('insert_one')
        doc = copy.deepcopy(document)
        if doc['_id'] in self.docs:
            raise DuplicateKeyError(self._duplicate_message('_id', doc['_id']), DUPLICATE_KEY_CODE)
        field = self._collision(doc)
        if field:
            raise DuplicateKeyError(self._duplicate_message(field, doc[field]), DUPLICATE_KEY_CODE)
        self.docs[doc['_id']] = doc
        return InsertOneResult(doc['_id'], True)

    def insert_many(self, documents: list[dict], ordered: bool = True) -> InsertManyResult:
        self._check_injected_error('insert_many')
        inserted = []
        write_errors = []
        for index, document in enumerate(documents):
            doc = copy.deepcopy(document)
            field = '_id' if doc['_id'] in self.docs else self._collision(doc)
            if field:
                write_errors.append({
                    'index': index,
                    'code': DUPLICATE_KEY_CODE,
                    'errmsg': self._duplicate_message(field, doc[field]),
                })
                if ordered:
                    break
                continue
            self.docs[doc['_id']] = doc
            inserted.append(doc['_id'])
        if write_errors:
            raise BulkWriteError({
                'writeErrors': write_errors,
                'writeConcernErrors': [],
                'nInserted': len(inserted),
                'nUpserted': 0,
                'nMatched': 0,
                'nModified': 0,
                'nRemoved': 0,
                'upserted': [],
            })
        return InsertManyResult(inserted, True)

    def find_one_and_update(self, filter: dict, update: dict, projection=None,
                            return_document: bool = False) -> dict | None:
        self._check_injected_error('find_one_and_update')
        for doc in self.docs.values():
            if not self._matches(doc, filter):
                continue
            before = copy.deepcopy(doc)
            after = {**doc, **update.get('$set', {})}
            field = self._collision(after, ignore_id=doc['_id'])
            if field:
                raise DuplicateKeyError(self._duplicate_message(field, after[field]), DUPLICATE_KEY_CODE)
            self.docs[doc['_id']] = after
            return copy.deepcopy(after) if return_document else before
        return None

    # ── read operations ──────────────────────────────────────

    def find_one(self, filter: dict, projection=None) -> dict | None:
        self._check_injected_error('find_one')
        for doc in self.docs.values():
            if self._matches(doc, filter):
                return copy.deepcopy(doc)
        return None
