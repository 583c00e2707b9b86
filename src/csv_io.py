import csv
from typing import Dict, Iterable, Iterator, Optional, TextIO

from errors import MalformedInputError
from models import (
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    AccountSnapshot,
    Transaction,
    TransactionType,
    parse_amount,
)

REQUIRED_COLUMNS = ("type", "client", "tx")
OUTPUT_HEADER = ("client", "available", "held", "total", "locked")


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Read transactions from CSV with a `type, client, tx, amount` header.

    Whitespace around fields is ignored and rows may stop short of the
    header (dispute/resolve/chargeback rows usually omit the amount).
    Raises MalformedInputError on the first row that cannot be parsed.
    """
    reader = csv.reader(stream)
    header = next(reader, None)
    if header is None:
        raise MalformedInputError("input is empty, expected a header row")

    columns = [name.strip() for name in header]
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise MalformedInputError(f"header is missing columns: {', '.join(missing)}", reader.line_num)

    for row in reader:
        if not any(field.strip() for field in row):
            continue
        extra = [field for field in row[len(columns):] if field.strip()]
        if extra:
            raise MalformedInputError(f"unexpected extra fields {extra}", reader.line_num)
        fields = {name: value.strip() for name, value in zip(columns, row)}
        yield parse_row(fields, reader.line_num)


def parse_row(fields: Dict[str, str], line_number: Optional[int] = None) -> Transaction:
    """Parse trimmed CSV fields into a Transaction."""
    type_str = fields.get("type", "")
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise MalformedInputError(f"unknown transaction type {type_str!r}", line_number) from None

    client_id = _parse_id(fields.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(fields.get("tx", ""), "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = fields.get("amount", "")
    if amount_str:
        try:
            amount = parse_amount(amount_str)
        except MalformedInputError as e:
            raise MalformedInputError(str(e), line_number) from None

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(text: str, column: str, maximum: int, line_number: Optional[int]) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedInputError(f"{column} must be an unsigned integer, got {text!r}", line_number)
    value = int(text)
    if value > maximum:
        raise MalformedInputError(f"{column} {value} out of range (max {maximum})", line_number)
    return value


def write_snapshots(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    """Write account snapshots as CSV in the order given."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in snapshots:
        writer.writerow(snapshot.as_row())
