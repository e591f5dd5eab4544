"""Compare an env file against its example and collect lint issues."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from envguard.core.classifier import SecretClassifier
from envguard.core.exceptions import EnvFileError
from envguard.core.models import ClassifierConfig, Finding, Record
from envguard.core.parser import parse_env_content, parse_env_file
from envguard.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LintOptions:
    """Inputs for a single validation run."""

    env_path: Path
    example_path: Path
    check_secrets: bool = True
    strict: bool = False
    exclude: Optional[List[str]] = None
    exclude_pattern: Optional[re.Pattern] = None
    only: Optional[List[str]] = None
    compare_mode: bool = False
    classifier_config: ClassifierConfig = field(default_factory=ClassifierConfig)


@dataclass
class ValidationResult:
    """Issues found when comparing an env file with its example."""

    env_file_name: str
    example_file_name: str
    missing_in_env: List[str] = field(default_factory=list)
    missing_in_example: List[str] = field(default_factory=list)
    duplicates_in_env: Dict[str, List[int]] = field(default_factory=dict)
    duplicates_in_example: Dict[str, List[int]] = field(default_factory=dict)
    potential_secrets: List[Finding] = field(default_factory=list)

    def issue_count(self, strict: bool = False) -> int:
        count = (
            len(self.missing_in_env)
            + len(self.duplicates_in_env)
            + len(self.duplicates_in_example)
            + len(self.potential_secrets)
        )
        if strict:
            count += len(self.missing_in_example)
        return count

    def to_dict(self) -> Dict[str, object]:
        return {
            "env_file": self.env_file_name,
            "example_file": self.example_file_name,
            "missing_in_env": self.missing_in_env,
            "missing_in_example": self.missing_in_example,
            "duplicates_in_env": self.duplicates_in_env,
            "duplicates_in_example": self.duplicates_in_example,
            "potential_secrets": [f.to_dict() for f in self.potential_secrets],
        }


def find_duplicates(records: Iterable[Record]) -> Dict[str, List[int]]:
    """Map each key defined more than once to the lines defining it."""
    lines_by_key: Dict[str, List[int]] = {}
    for record in records:
        lines_by_key.setdefault(record.key, []).append(record.line_number)
    return {key: lines for key, lines in lines_by_key.items() if len(lines) > 1}


def filter_variables(
    keys: Sequence[str],
    exclude: Optional[Iterable[str]] = None,
    exclude_pattern: Optional[re.Pattern] = None,
    only: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Narrow a list of variable names.

    Args:
        keys: Variable names in their original order
        exclude: Names to drop
        exclude_pattern: Names matching this regex are dropped
        only: When given, names outside this set are dropped

    Returns:
        The remaining names, order preserved
    """
    excluded = set(exclude or ())
    allowed = set(only) if only else None

    result = []
    for key in keys:
        if key in excluded:
            continue
        if exclude_pattern is not None and exclude_pattern.search(key):
            continue
        if allowed is not None and key not in allowed:
            continue
        result.append(key)
    return result


def _unique_keys(records: Iterable[Record]) -> List[str]:
    return list(dict.fromkeys(record.key for record in records))


def validate_env(
    options: LintOptions, classifier: Optional[SecretClassifier] = None
) -> ValidationResult:
    """
    Validate an env file against its example.

    Args:
        options: Paths, filters and secret detection settings
        classifier: Secret classifier to reuse (bundled rules by default)

    Returns:
        ValidationResult with every issue found
    """
    env_records = parse_env_file(options.env_path)
    example_records = parse_env_file(options.example_path)

    env_keys = _unique_keys(env_records)
    example_keys = _unique_keys(example_records)

    filtered_env_keys = filter_variables(env_keys, options.exclude, options.exclude_pattern, options.only)
    filtered_example_keys = filter_variables(
        example_keys, options.exclude, options.exclude_pattern, options.only
    )

    env_key_set = set(env_keys)
    example_key_set = set(example_keys)

    result = ValidationResult(
        env_file_name=Path(options.env_path).name,
        example_file_name=Path(options.example_path).name,
        missing_in_env=[k for k in filtered_example_keys if k not in env_key_set],
        missing_in_example=[k for k in filtered_env_keys if k not in example_key_set],
        duplicates_in_env=find_duplicates(env_records),
        duplicates_in_example=find_duplicates(example_records),
    )

    if options.check_secrets:
        if options.compare_mode:
            checked = set(filtered_env_keys)
            records_to_check = [r for r in env_records if r.key in checked]
        else:
            records_to_check = env_records
        classifier = classifier or SecretClassifier()
        result.potential_secrets = classifier.classify(records_to_check, options.classifier_config)

    return result


def has_errors(result: ValidationResult, strict: bool) -> bool:
    """Check whether a validation result should fail the run."""
    return result.issue_count(strict) > 0


def remove_duplicates(file_path: Union[str, Path]) -> Tuple[int, List[str]]:
    """
    Rewrite an env file keeping only the first definition of each key.

    Comments, blank lines and line endings are left untouched.

    Args:
        file_path: Env file to fix in place

    Returns:
        Number of lines removed and the keys that had duplicates

    Raises:
        EnvFileError: If the file cannot be read or written
    """
    path = Path(file_path)
    try:
        content = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(f"Failed to read {path}: {e}", details={"path": str(path)})

    duplicates = find_duplicates(parse_env_content(content))
    dropped = {line for lines in duplicates.values() for line in lines[1:]}
    if not dropped:
        return 0, []

    kept = [line for number, line in enumerate(content.split("\n"), start=1) if number not in dropped]
    try:
        path.write_bytes("\n".join(kept).encode("utf-8"))
    except OSError as e:
        raise EnvFileError(f"Failed to write {path}: {e}", details={"path": str(path)})

    logger.info("Removed %d duplicate definition(s) from %s", len(dropped), path)
    return len(dropped), list(duplicates)
