"""
File I/O utilities for churnmap.
Handles loading CSV tables as records, writing the merged CSV, and
reading/writing YAML and JSON side files.
"""

import csv
import json
import yaml
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Union
from .logging_utils import get_logger

logger = get_logger(__name__)

Record = Dict[str, str]


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Configuration dictionary (empty if the file holds no document)

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading config from: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    return config or {}


def load_records(
    file_path: Union[str, Path],
    encoding: str = "utf-8"
) -> List[Record]:
    """
    Load a CSV file as an ordered list of column -> value records.

    The first row is the header. Every value is kept as a string. Rows
    shorter than the header are padded with "", fields beyond the header
    width are dropped. A file without a header row gives an empty list.

    Args:
        file_path: Path to CSV file
        encoding: Text encoding of the file

    Returns:
        List of records in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        pandas.errors.ParserError: If the CSV framing is broken

    Example:
        >>> records = load_records("data/designite.csv")
        >>> records[0]["file_path"]
        'src/main/java/A.java'
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    logger.info(f"Loading CSV: {file_path}")

    read_options = dict(
        header=None,
        dtype=str,
        keep_default_na=False,
        engine='python',
        encoding=encoding,
    )

    try:
        first_row = pd.read_csv(file_path, nrows=1, **read_options)
    except pd.errors.EmptyDataError:
        logger.warning(f"No header row in {file_path.name} - treating as empty table")
        return []

    width = len(first_row.columns)

    raw = pd.read_csv(
        file_path,
        on_bad_lines=lambda fields: fields[:width],
        **read_options
    ).fillna("")

    header = [str(name) for name in raw.iloc[0]]
    records = [
        dict(zip(header, values))
        for values in raw.iloc[1:].itertuples(index=False, name=None)
    ]

    logger.info(f"Loaded {len(records)} rows, {len(header)} columns")

    return records


def infer_columns(records: Iterable[Record]) -> List[str]:
    """
    Ordered union of the column names of all records, first-seen first.

    Example:
        >>> infer_columns([{"a": "1"}, {"a": "2", "b": "3"}])
        ['a', 'b']
    """
    columns: Dict[str, None] = {}
    for record in records:
        for name in record:
            columns.setdefault(name, None)
    return list(columns)


def write_rows(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    quote_all: bool = True
) -> Path:
    """
    Write a header and rows to CSV, creating the parent directory.

    Args:
        header: Output column names
        rows: Row values aligned to the header
        file_path: Output file path
        encoding: Text encoding of the output
        quote_all: Quote every field (otherwise only where needed)

    Returns:
        The path written
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Saving CSV: {file_path}")

    df = pd.DataFrame(list(rows), columns=list(header), dtype=str)
    df.to_csv(
        file_path,
        index=False,
        encoding=encoding,
        quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
    )

    logger.info(f"Saved {len(df)} rows to: {file_path}")

    return file_path


def save_json(
    data: Union[Dict, List],
    file_path: Union[str, Path],
    indent: int = 2
) -> None:
    """
    Save data to JSON file.

    Args:
        data: Data to save (dict or list)
        file_path: Output file path
        indent: JSON indentation (default: 2)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Saving JSON: {file_path}")

    with open(file_path, 'w') as f:
        json.dump(data, f, indent=indent, default=str)

    logger.info(f"Saved JSON to: {file_path}")
