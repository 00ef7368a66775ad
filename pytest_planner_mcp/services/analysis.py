"""
Analysis Service - Load a class, run the pipeline and wrap the outcome.

Core exceptions become failed results here:
    SourceSyntaxError    -> SYNTAX_ERROR
    ClassNotFoundError   -> CLASS_NOT_FOUND (details["available"] = classes)
    MethodNotFoundError  -> METHOD_NOT_FOUND (details["available"] = methods)

AnalysisInvariantError is a programming error and propagates.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from ..core.errors import ClassNotFoundError, MethodNotFoundError, SourceSyntaxError
from ..core.pipeline import ClassAnalysis, analyze_class
from ..core.planner.models import MethodTestStatus, priority_for
from .base import ErrorCode, ServiceResult
from .code_loader import CodeLoader, LoadedCode


@dataclass(frozen=True)
class MethodListing:
    """Per-method status rows plus the order they should be tested in."""
    class_name: str
    component_type: str
    methods: tuple[MethodTestStatus, ...]

    @property
    def recommended_order(self) -> list[str]:
        ranked = sorted(self.methods, key=lambda m: m.rank, reverse=True)
        return [m.method_name for m in ranked]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "class_name": self.class_name,
            "component_type": self.component_type,
            "methods": [m.to_dict() for m in self.methods],
            "recommended_order": self.recommended_order,
        }


class AnalysisService:
    """
    Service for analyzing one class.

    Orchestrates:
    1. Code loading (from file or string)
    2. The analysis pipeline
    3. Translating input errors into ServiceResult failures
    """

    def __init__(
        self,
        code_loader: CodeLoader | None = None,
        policy: AnalysisPolicy = DEFAULT_POLICY
    ):
        self._loader = code_loader or CodeLoader()
        self._policy = policy

    def analyze(
        self,
        code: str | None = None,
        file_path: str | None = None,
        class_name: str | None = None,
        method_name: str | None = None
    ) -> ServiceResult[ClassAnalysis]:
        """
        Analyze a class.

        Args:
            code: Direct code string
            file_path: Path to Python file
            class_name: Class to analyze (first class when omitted)
            method_name: Focus method-level results on one method

        Returns:
            ServiceResult containing ClassAnalysis on success

        Example:
            result = AnalysisService().analyze(code=source, class_name="UserService")
            if result.success:
                print(result.data.business_patterns)
        """
        result = self.analyze_with_metadata(code, file_path, class_name, method_name)
        return result.map(lambda pair: pair[0])

    def analyze_with_metadata(
        self,
        code: str | None = None,
        file_path: str | None = None,
        class_name: str | None = None,
        method_name: str | None = None
    ) -> ServiceResult[tuple[ClassAnalysis, LoadedCode]]:
        """Analyze and also return the load metadata (module name, source path)."""

        # Step 1: Load code
        load_result = self._loader.load(code=code, file_path=file_path)

        if not load_result.success:
            return ServiceResult.fail(
                load_result.error.code,
                load_result.error.message,
                load_result.error.details
            )

        loaded = load_result.data

        # Step 2: Run the pipeline
        try:
            analysis = analyze_class(loaded.content, class_name, method_name, self._policy)
        except SourceSyntaxError as e:
            return ServiceResult.fail(ErrorCode.SYNTAX_ERROR, str(e), {"line": e.line})
        except ClassNotFoundError as e:
            return ServiceResult.fail(ErrorCode.CLASS_NOT_FOUND, str(e), {"available": e.available})
        except MethodNotFoundError as e:
            return ServiceResult.fail(ErrorCode.METHOD_NOT_FOUND, str(e), {"available": e.available})

        return ServiceResult.ok((analysis, loaded))

    def list_methods(
        self,
        code: str | None = None,
        file_path: str | None = None,
        class_name: str | None = None
    ) -> ServiceResult[MethodListing]:
        """Analyze a class and return one MethodTestStatus row per public method."""
        return self.analyze(code, file_path, class_name).map(
            lambda analysis: MethodListing(
                class_name=analysis.class_name,
                component_type=analysis.component_type,
                methods=tuple(method_statuses(analysis))
            )
        )


def method_statuses(analysis: ClassAnalysis) -> list[MethodTestStatus]:
    """Fresh, untested status rows for every analyzed method."""
    return [
        MethodTestStatus(
            method_name=flow.name,
            complexity=flow.complexity_score,
            priority=priority_for(flow.complexity_score),
            dependencies=list(flow.dependency_usage),
            error_count=len(flow.error_paths)
        )
        for flow in analysis.methods
    ]
