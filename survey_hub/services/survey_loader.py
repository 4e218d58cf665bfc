"""Default survey loader with caching and validation.

This module loads the default survey definitions from YAML files, validates
them against the survey creation schema, and seeds them into the database
on request. Seeding is idempotent: a survey whose title already exists is
skipped.
"""

from pathlib import Path
from functools import lru_cache
from typing import List, Optional

import yaml
from pydantic import ValidationError

from survey_hub.config import get_settings
from survey_hub.models.survey import Survey
from survey_hub.schemas.survey import SurveyCreate
from survey_hub.services.survey_repository import SurveyRepository
from survey_hub.logging_config import get_logger

logger = get_logger(__name__)


class SurveyDefinitionNotFoundError(Exception):
    """Raised when a survey definition file is not found."""
    pass


class SurveyDefinitionError(Exception):
    """Raised when a survey definition fails to parse or validate."""
    pass


class SurveyLoader:
    """Service for loading and caching default survey definitions.

    Definitions are YAML files in the surveys directory, one survey per
    file, validated against ``SurveyCreate``. Results are cached.
    """

    def __init__(self, surveys_dir: Optional[str] = None):
        """Initialize survey loader.

        Args:
            surveys_dir: Path to surveys directory (defaults to ./surveys
                in the project root)
        """
        if surveys_dir is None:
            project_root = Path(__file__).parent.parent.parent
            surveys_dir = project_root / "surveys"

        self.surveys_dir = Path(surveys_dir)

        if not self.surveys_dir.exists():
            logger.warning(f"Surveys directory not found: {self.surveys_dir}")

    @lru_cache(maxsize=128)
    def load_survey(self, definition_id: str) -> SurveyCreate:
        """Load and validate a survey definition from a YAML file.

        Args:
            definition_id: YAML filename without the .yaml extension

        Returns:
            Validated SurveyCreate payload

        Raises:
            SurveyDefinitionNotFoundError: If the file doesn't exist
            SurveyDefinitionError: If the file fails to parse or validate

        Example:
            >>> loader = SurveyLoader()
            >>> definition = loader.load_survey("01_congress_evaluation")
            >>> len(definition.segments)
            4
        """
        yaml_path = self.surveys_dir / f"{definition_id}.yaml"

        if not yaml_path.exists():
            logger.error(f"Survey file not found: {yaml_path}")
            raise SurveyDefinitionNotFoundError(
                f"Survey definition '{definition_id}' not found at {yaml_path}"
            )

        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error for {definition_id}: {e}")
            raise SurveyDefinitionError(f"Invalid YAML in survey '{definition_id}': {e}")
        except OSError as e:
            logger.error(f"Error reading survey file {yaml_path}: {e}")
            raise SurveyDefinitionError(f"Error reading survey '{definition_id}': {e}")

        if not isinstance(raw_data, dict):
            raise SurveyDefinitionError(
                f"Survey '{definition_id}' must be a mapping at the top level"
            )

        try:
            definition = SurveyCreate(**raw_data)
        except ValidationError as e:
            logger.error(f"Validation error for survey {definition_id}: {e}")
            raise SurveyDefinitionError(f"Validation failed for survey '{definition_id}': {e}")

        logger.info(
            f"Loaded survey definition {definition_id}: {definition.title!r} "
            f"({definition.question_count} questions)"
        )
        return definition

    def list_definitions(self) -> List[str]:
        """List available definition ids, sorted by filename.

        Example:
            >>> SurveyLoader().list_definitions()
            ['01_congress_evaluation', '02_event_evaluation']
        """
        if not self.surveys_dir.exists():
            return []

        definition_ids = sorted(f.stem for f in self.surveys_dir.glob("*.yaml"))
        logger.debug(f"Found {len(definition_ids)} survey definitions: {definition_ids}")
        return definition_ids

    def load_all(self) -> List[SurveyCreate]:
        """Load every definition in filename order."""
        return [self.load_survey(definition_id) for definition_id in self.list_definitions()]

    def clear_cache(self):
        """Clear the definition cache.

        Useful during development or when definitions are edited at runtime.
        """
        self.load_survey.cache_clear()
        logger.info("Survey definition cache cleared")


def seed_default_surveys(repository: SurveyRepository, loader: SurveyLoader) -> List[Survey]:
    """Create each default survey unless one with the same title exists.

    Args:
        repository: Survey repository bound to a database session
        loader: Loader for the default definitions

    Returns:
        The surveys created by this call (empty when already seeded)
    """
    created = []
    for definition in loader.load_all():
        if repository.find_survey_by_title(definition.title) is not None:
            logger.debug(f"Default survey already present: {definition.title!r}")
            continue
        created.append(repository.create_survey(definition))

    logger.info(f"Seeded {len(created)} default surveys")
    return created


# Global singleton instance
_loader_instance: Optional[SurveyLoader] = None


def get_survey_loader() -> SurveyLoader:
    """Get global SurveyLoader instance.

    Creates singleton instance on first call, reading the directory from
    settings.

    Returns:
        Global SurveyLoader instance
    """
    global _loader_instance
    if _loader_instance is None:
        surveys_dir = get_settings().default_surveys_dir
        if not Path(surveys_dir).exists():
            surveys_dir = None
        _loader_instance = SurveyLoader(surveys_dir)
    return _loader_instance
