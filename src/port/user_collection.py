from typing import Any, Mapping, Protocol, Sequence


class UserCollection(Protocol):
    """The four document-store operations the user repository relies on.

    ``pymongo.collection.Collection`` satisfies this protocol; tests pass an
    in-memory implementation instead.
    """
    def insert_one(self, document: Mapping[str, Any]) -> Any:
        ...

    def insert_many(self, documents: Sequence[Mapping[str, Any]], ordered: bool = True) -> Any:
        ...

    def find_one(self, filter: Mapping[str, Any], projection: Any = None) -> dict | None:
        ...

    def find_one_and_update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        projection: Any = None,
        return_document: bool = False,
    ) -> dict | None:
        ...
