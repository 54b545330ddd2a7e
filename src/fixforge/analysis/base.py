"""
Producer contracts for the analysis side of the pipeline.

An analyzer yields Issues (optionally carrying Edits); a suggestion provider
proposes replacement text. Neither knows anything about how edits are applied.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from fixforge.logging_config import logger
from fixforge.schemas import Issue


@dataclass
class AnalyzeOptions:
    """Knobs shared by all analyzers."""
    long_function_lines: int = 80
    suggest_docs: bool = True
    suggest_names: bool = True


class SuggestionProvider(ABC):
    """
    Source of replacement text. Both queries may return None, which means
    "no suggestion" and is not an error.
    """

    @abstractmethod
    def suggest_identifier(self, current: str, type_hint: str = "", usage_hint: str = "") -> Optional[str]:
        """Suggest a clearer name for `current`, or None if it is fine as is."""

    @abstractmethod
    def doc_for_signature(self, signature: str) -> Optional[str]:
        """Produce short documentation text for a callable signature."""


class Analyzer(ABC):
    """Base class for analyzers: one file at a time, issues out."""

    name = "analyzer"
    extensions: tuple = ()

    def analyze_paths(
        self,
        paths: Iterable[Union[str, Path]],
        options: Optional[AnalyzeOptions] = None,
        suggester: Optional[SuggestionProvider] = None,
    ) -> List[Issue]:
        """Analyze every given file; files this analyzer can't handle are skipped."""
        options = options or AnalyzeOptions()
        issues: List[Issue] = []
        checked = 0

        for path in paths:
            path = Path(path)
            if self.extensions and path.suffix not in self.extensions:
                logger.debug(f"{self.name}: skipping {path} (unsupported extension)")
                continue
            issues.extend(self.analyze_file(path, options, suggester))
            checked += 1

        logger.info(f"{self.name}: checked {checked} file(s), found {len(issues)} issue(s)")
        return issues

    @abstractmethod
    def analyze_file(
        self,
        path: Path,
        options: AnalyzeOptions,
        suggester: Optional[SuggestionProvider] = None,
    ) -> List[Issue]:
        """Analyze one file. Unreadable or unparseable files yield no issues."""
