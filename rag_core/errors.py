from __future__ import annotations

from typing import Optional


class RagCoreError(Exception):
    pass


class ConfigurationError(RagCoreError, ValueError):
    pass


class DependencyNotInstalledError(RagCoreError, ImportError):
    pass


class DimensionMismatchError(RagCoreError, ValueError):
    def __init__(self, expected: int, actual: int, *, what: str = "embedding"):
        self.expected = int(expected)
        self.actual = int(actual)
        super().__init__(f"{what} 维度不匹配: 期望 {self.expected}, 实际 {self.actual}")


class ProviderError(RagCoreError):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (status={status_code})"
        super().__init__(message)


class SnapshotDecodeError(RagCoreError, ValueError):
    pass
