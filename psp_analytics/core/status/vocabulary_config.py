"""
Status vocabulary configuration.

Loads the substring vocabulary used by StatusClassifier from YAML files
and offers a builder for programmatic vocabularies.
"""

from pathlib import Path
from typing import Any

import yaml

from .classifier import StatusVocabulary

CATEGORY_KEYS = ("approved", "declined", "filtered")
DECLINE_TYPE_KEYS = {"hard": "hard_decline", "soft": "soft_decline"}


class StatusVocabularyLoader:
    """
    Loads a status vocabulary from a YAML configuration file.

    Expected YAML format:
    ```yaml
    statuses:
      approved: [approved, success, captured]
      declined: [declined, fail, error, refused]
      filtered: [filtered]

    decline_types:          # optional
      hard: [stolen, do_not_honor]
      soft: [insufficient, timeout]
    ```

    Categories left out of ``statuses`` keep their default terms.
    """

    def __init__(self, config_path: str | Path):
        """
        Args:
            config_path: Path to the YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Status vocabulary file not found: {config_path}")

    def load(self) -> StatusVocabulary:
        """
        Parse the YAML file into a StatusVocabulary.

        Raises:
            ValueError: If the file has no 'statuses' section or a category
                is not a list of strings
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or "statuses" not in config:
            raise ValueError("Configuration file must contain 'statuses' section")

        statuses = config["statuses"] or {}
        if not isinstance(statuses, dict):
            raise ValueError("'statuses' must map categories to lists of terms")

        unknown = set(statuses) - set(CATEGORY_KEYS)
        if unknown:
            raise ValueError(
                f"Unknown status categories: {', '.join(sorted(unknown))}. "
                f"Must be among: {', '.join(CATEGORY_KEYS)}"
            )

        kwargs: dict[str, Any] = {}
        for category in CATEGORY_KEYS:
            if category in statuses:
                kwargs[category] = self._parse_terms(category, statuses[category])

        decline_types = config.get("decline_types") or {}
        if not isinstance(decline_types, dict):
            raise ValueError("'decline_types' must map hard/soft to lists of terms")
        for key, terms in decline_types.items():
            if key not in DECLINE_TYPE_KEYS:
                raise ValueError(f"Invalid decline type '{key}'. Must be 'hard' or 'soft'")
            kwargs[DECLINE_TYPE_KEYS[key]] = self._parse_terms(f"decline_types.{key}", terms)

        return StatusVocabulary(**kwargs)

    @staticmethod
    def _parse_terms(name: str, terms: Any) -> tuple[str, ...]:
        if not isinstance(terms, list):
            raise ValueError(f"Terms for '{name}' must be a list")
        if not all(isinstance(term, str) for term in terms):
            raise ValueError(f"Terms for '{name}' must be strings")
        return tuple(terms)


class StatusVocabularyBuilder:
    """
    Programmatically build a status vocabulary (for tests or embedding).

    Starts from the default vocabulary; ``replace=True`` on a call discards
    the default terms of that category first.
    """

    def __init__(self):
        defaults = StatusVocabulary()
        self._terms: dict[str, list[str]] = {
            "approved": list(defaults.approved),
            "declined": list(defaults.declined),
            "filtered": list(defaults.filtered),
            "hard_decline": [],
            "soft_decline": [],
        }

    def _add(self, key: str, terms: tuple[str, ...], replace: bool) -> "StatusVocabularyBuilder":
        if replace:
            self._terms[key] = []
        self._terms[key].extend(terms)
        return self

    def add_approved(self, *terms: str, replace: bool = False) -> "StatusVocabularyBuilder":
        return self._add("approved", terms, replace)

    def add_declined(self, *terms: str, replace: bool = False) -> "StatusVocabularyBuilder":
        return self._add("declined", terms, replace)

    def add_filtered(self, *terms: str, replace: bool = False) -> "StatusVocabularyBuilder":
        return self._add("filtered", terms, replace)

    def add_hard_decline(self, *terms: str) -> "StatusVocabularyBuilder":
        return self._add("hard_decline", terms, False)

    def add_soft_decline(self, *terms: str) -> "StatusVocabularyBuilder":
        return self._add("soft_decline", terms, False)

    def build(self) -> StatusVocabulary:
        return StatusVocabulary(**{key: tuple(terms) for key, terms in self._terms.items()})
