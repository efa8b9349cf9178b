"""CSV batch import — turns an uploaded file into raw User records.

No field validation or hashing happens here; UserService does both.
"""

import csv
import io
import logging
from pathlib import PurePath
from typing import Iterator

from domain.model.errors import MalformedInputError, UnsupportedFormatError
from domain.model.user import User

logger = logging.getLogger(__name__)

CSV_EXTENSION = '.csv'
# CSV header -> User attribute
COLUMNS = {
    'name': 'name',
    'email': 'email',
    'password': 'password',
    'username': 'user_name',
}


def parse_users_csv(raw: bytes, filename: str) -> Iterator[User]:
    """Parse an uploaded CSV file into User records.

    The whole file is parsed before returning, so every format error is
    raised here rather than while iterating.

    Raises:
        UnsupportedFormatError: filename does not end in .csv
        MalformedInputError: undecodable bytes, bad CSV, missing header
            columns or a row whose width differs from the header
    """
    extension = PurePath(filename or '').suffix.lower()
    if extension != CSV_EXTENSION:
        raise UnsupportedFormatError("Only accept CSV file", details=f"got '{extension or filename}'")

    try:
        text = raw.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise MalformedInputError("Failed to process CSV file", details=f"not valid UTF-8: {e.reason}") from e

    try:
        rows = [row for row in csv.reader(io.StringIO(text, newline=''), strict=True) if row]
    except csv.Error as e:
        raise MalformedInputError("Failed to process CSV file", details=str(e)) from e

    if not rows:
        raise MalformedInputError("Failed to process CSV file", details="file is empty")

    header = [column.strip() for column in rows[0]]
    missing = [column for column in COLUMNS if column not in header]
    if missing:
        raise MalformedInputError("Failed to process CSV file", details=f"missing columns: {', '.join(missing)}")

    positions = {attr: header.index(column) for column, attr in COLUMNS.items()}
    users = []
    for line, row in enumerate(rows[1:], start=2):
        if len(row) != len(header):
            raise MalformedInputError(
                "Failed to process CSV file",
                details=f"line {line}: expected {len(header)} columns, got {len(row)}",
            )
        users.append(User(**{attr: row[index] for attr, index in positions.items()}))

    logger.info("Parsed users CSV", extra={"uploadName": filename, "count": len(users)})
    return iter(users)
