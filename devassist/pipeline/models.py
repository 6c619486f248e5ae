"""
Pipeline data models.

Plain dataclasses passed between the pipeline stages and handed to callers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from devassist.database import CodeSnippet


@dataclass
class PipelineContext:
    """
    Where the analysed text came from.

    Attributes:
        source_app: Application the text was captured from
        file_path: File being edited, if known
        language: Language tag, if known
    """

    source_app: str
    file_path: Optional[str] = None
    language: Optional[str] = None


@dataclass
class ErrorSolution:
    """A detected error and one proposed solution."""

    error: str
    solution: str

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "solution": self.solution}


@dataclass
class PipelineResult:
    """
    Merged output of one pipeline run.

    ``errors`` and ``snippets`` are None when the stage found nothing, which
    is how callers observe an absent or failed sub-result.
    """

    suggestions: List[str] = field(default_factory=list)
    errors: Optional[List[ErrorSolution]] = None
    snippets: Optional[List[CodeSnippet]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": list(self.suggestions),
            "errors": [e.to_dict() for e in self.errors] if self.errors is not None else None,
            "snippets": (
                [s.to_dict() for s in self.snippets] if self.snippets is not None else None
            ),
        }
