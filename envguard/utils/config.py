"""
Configuration management for envguard
Loads per-project settings from .envguardrc.json
"""
import json
import re
from pathlib import Path
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from envguard.core.exceptions import ConfigurationError
from envguard.core.models import DEFAULT_MIN_CONFIDENCE, ClassifierConfig
from envguard.utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_FILE_NAME = ".envguardrc.json"


class LintSettings(BaseModel):
    """Project settings; camelCase keys are accepted alongside snake_case."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    strict: bool = Field(False, description="Fail on variables missing from the example file")
    check_secrets: bool = Field(True, alias="checkSecrets", description="Run secret detection")
    exclude: List[str] = Field(default_factory=list, description="Variables to skip")
    exclude_pattern: Optional[str] = Field(
        None, alias="excludePattern", description="Regex of variables to skip"
    )
    only: List[str] = Field(default_factory=list, description="Only check these variables")
    secret_allowlist: List[str] = Field(
        default_factory=list,
        alias="secretAllowlist",
        validation_alias=AliasChoices("secretAllowlist", "secretWhitelist", "secret_allowlist"),
        description="Variables never reported as secrets",
    )
    min_secret_confidence: float = Field(
        DEFAULT_MIN_CONFIDENCE,
        ge=0.0,
        le=1.0,
        alias="minSecretConfidence",
        description="Secret detection threshold",
    )
    env_file: str = Field(".env", alias="envFile", description="Env file to validate")
    example_file: str = Field(".env.example", alias="exampleFile", description="Example file")

    @field_validator("exclude_pattern")
    @classmethod
    def _check_exclude_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression: {e}")
        return value

    def compiled_exclude_pattern(self) -> Optional[re.Pattern]:
        return re.compile(self.exclude_pattern) if self.exclude_pattern else None

    def classifier_config(self) -> ClassifierConfig:
        """Build the classifier configuration these settings describe."""
        return ClassifierConfig(
            allow_list=frozenset(self.secret_allowlist),
            min_confidence=self.min_secret_confidence,
        )


class ConfigManager:
    """Manages the envguard settings file of a project directory"""

    def __init__(self, directory: Union[str, Path] = "."):
        """
        Initialize config manager

        Args:
            directory: Project directory holding .envguardrc.json
        """
        self.config_path = Path(directory) / CONFIG_FILE_NAME
        self._settings: Optional[LintSettings] = None

    def exists(self) -> bool:
        return self.config_path.exists()

    def load(self) -> LintSettings:
        """Load settings from file, falling back to defaults when absent."""
        if self._settings is not None:
            return self._settings

        if not self.config_path.exists():
            self._settings = LintSettings()
            return self._settings

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Could not read {self.config_path.name}: {e}",
                details={"path": str(self.config_path)},
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{self.config_path.name} must contain a JSON object",
                details={"path": str(self.config_path)},
            )

        try:
            self._settings = LintSettings.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid settings in {self.config_path.name}: {e.error_count()} error(s)",
                details={"path": str(self.config_path), "errors": e.errors(include_url=False)},
            )

        logger.info("Loaded settings from %s", self.config_path)
        return self._settings

    def save(self, settings: Optional[LintSettings] = None) -> None:
        """
        Save settings to file

        Args:
            settings: Settings to save (uses current if None)
        """
        if settings is not None:
            self._settings = settings

        if self._settings is None:
            raise ConfigurationError("No configuration to save")

        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self._settings.model_dump(by_alias=True), f, indent=2)
            f.write("\n")

    def create_default(self, overwrite: bool = False) -> Path:
        """Write a settings file holding the defaults."""
        if self.exists() and not overwrite:
            raise ConfigurationError(
                f"{self.config_path.name} already exists",
                details={"path": str(self.config_path)},
            )
        self.save(LintSettings())
        return self.config_path
