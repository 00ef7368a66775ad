"""
Code Loader - Read the class source a tool call points at.

A tool call passes inline ``code``, a ``file_path``, or both. A readable
file wins; an unreadable or missing file falls back to the inline code
when there is some.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..constants import ALLOWED_EXTENSIONS, MAX_CODE_SIZE
from .base import ErrorCode, ServiceResult


@dataclass(frozen=True)
class LoadedCode:
    """
    Source ready for analysis.

    Attributes:
        content: The Python source code
        module_name: File stem ("module" for inline code), used for default test paths
        source_path: File the code came from (None for inline code)
    """
    content: str
    module_name: str
    source_path: str | None = None

    @property
    def display_path(self) -> str:
        return self.source_path or "<inline>"


class CodeLoader:
    """Validates and loads Python source (extension, existence, readability, size)."""

    def __init__(
        self,
        max_size: int = MAX_CODE_SIZE,
        allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS
    ):
        self._max_size = max_size
        self._allowed_extensions = allowed_extensions

    def load(
        self,
        code: str | None = None,
        file_path: str | None = None
    ) -> ServiceResult[LoadedCode]:
        """
        Load code from file path or direct input.

        Args:
            code: Inline source (also the fallback for an unreadable file)
            file_path: Path to a .py file

        Returns:
            ServiceResult with LoadedCode on success
        """
        if file_path:
            return self._load_file(Path(file_path), fallback_code=code)
        if code is not None:
            return self._accept(code, "module", None)
        return ServiceResult.fail(
            ErrorCode.MISSING_INPUT,
            "Please provide either 'file_path' or 'code'"
        )

    def _load_file(self, path: Path, fallback_code: str | None) -> ServiceResult[LoadedCode]:
        if path.suffix not in self._allowed_extensions:
            return ServiceResult.fail(
                ErrorCode.INVALID_EXTENSION,
                f"Only Python files allowed (got {path.suffix or 'no extension'})",
                details={"extension": path.suffix, "allowed": sorted(self._allowed_extensions)}
            )

        if not path.exists():
            if fallback_code is not None:
                return self._accept(fallback_code, path.stem, None)
            return ServiceResult.fail(ErrorCode.FILE_NOT_FOUND, f"File not found: {path}")

        if not path.is_file():
            return ServiceResult.fail(ErrorCode.VALIDATION_ERROR, f"Path is not a file: {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError:
            if fallback_code is not None:
                return self._accept(fallback_code, path.stem, None)
            return ServiceResult.fail(ErrorCode.PERMISSION_DENIED, f"Permission denied: {path}")
        except (OSError, UnicodeDecodeError) as e:
            if fallback_code is not None:
                return self._accept(fallback_code, path.stem, None)
            return ServiceResult.fail(ErrorCode.INTERNAL_ERROR, f"Error reading file: {e}")

        return self._accept(content, path.stem, str(path))

    def _accept(self, content: str, module_name: str, source_path: str | None) -> ServiceResult[LoadedCode]:
        """Size check, then wrap."""
        if len(content) > self._max_size:
            what = "File" if source_path else "Code"
            return ServiceResult.fail(
                ErrorCode.FILE_TOO_LARGE,
                f"{what} too large: {len(content):,} characters (max: {self._max_size:,})",
                details={"size": len(content), "max_size": self._max_size}
            )

        return ServiceResult.ok(LoadedCode(
            content=content,
            module_name=module_name,
            source_path=source_path
        ))
