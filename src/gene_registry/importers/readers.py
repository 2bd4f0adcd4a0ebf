"""Tab-separated input reading shared by the importers."""

from pathlib import Path
from typing import Iterator

import polars as pl
import structlog

from gene_registry.exceptions import ParseError

logger = structlog.get_logger()


def read_tsv_rows(path: Path, min_columns: int) -> Iterator[tuple[int, list[str]]]:
    """Yield the data rows of a headerless TSV file in file order.

    Lines starting with '#' and blank lines are skipped. Fields are split
    on tabs only, so GTF attribute values keep their double quotes and
    empty fields come back as "". Every record is checked for width before
    the first one is yielded.

    Args:
        path: Path to the tab-separated file
        min_columns: Number of columns every record must have

    Yields:
        Tuples of (record_number, fields), record numbers starting at 1

    Raises:
        ParseError: If any record has fewer than min_columns columns
    """
    path = Path(path)

    lines = pl.Series("line", path.read_text().splitlines(), dtype=pl.String)
    lines = lines.filter(~lines.str.starts_with("#") & (lines.str.len_chars() > 0))

    if lines.len() == 0:
        logger.warning("tsv_empty", path=str(path))
        return

    rows = lines.str.split("\t")
    widths = rows.list.len()

    short = (widths < min_columns).arg_true()
    if short.len() > 0:
        index = short[0]
        raise ParseError(
            f"expected at least {min_columns} tab-separated columns, found {widths[index]}",
            filename=str(path),
            record_number=index + 1,
        )

    logger.debug("tsv_read", path=str(path), rows=rows.len(), columns=widths.max())

    for record_number, fields in enumerate(rows.to_list(), start=1):
        yield record_number, fields


def parse_int(value: str, field_name: str, path: Path, record_number: int) -> int:
    """Parse an integer field, raising ParseError with the record position."""
    try:
        return int(value)
    except ValueError:
        raise ParseError(
            f"{field_name} is not a number: {value!r}",
            filename=str(path),
            record_number=record_number,
        ) from None


def count_lines(path: Path) -> int:
    """Count the lines of a text file, comments included."""
    with open(path, "rb") as f:
        return sum(1 for _ in f)
