"""Reader for dotenv-style KEY=VALUE files."""

import re
from pathlib import Path
from typing import List, Union

from envguard.core.exceptions import EnvFileError
from envguard.core.models import Record
from envguard.utils.logger import get_logger

logger = get_logger(__name__)

_RE_ASSIGNMENT = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_content(content: str) -> List[Record]:
    """
    Parse dotenv text into records.

    Blank lines and ``#`` comments are skipped, as are lines that are not
    assignments. One layer of matching quotes is removed from values.

    Args:
        content: File content as string

    Returns:
        Records in file order with 1-based line numbers
    """
    records: List[Record] = []
    for index, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        match = _RE_ASSIGNMENT.match(stripped)
        if not match:
            logger.debug("Line %d is not an assignment, ignoring", index)
            continue

        records.append(Record(key=match.group(1), value=_strip_quotes(match.group(2)), line_number=index))
    return records


def parse_env_file(file_path: Union[str, Path]) -> List[Record]:
    """
    Parse an env file from disk.

    Returns an empty list when the file does not exist.

    Raises:
        EnvFileError: If the file exists but cannot be read or decoded
    """
    path = Path(file_path)
    if not path.exists():
        return []

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(f"Failed to read {path}: {e}", details={"path": str(path)})

    records = parse_env_content(content)
    logger.debug("Parsed %d variables from %s", len(records), path)
    return records
