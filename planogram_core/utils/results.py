from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_handler import PlanogramError


@dataclass
class OperationResult:
    """Outcome of a layout mutation or a save/load call.

    Exactly one of ``value`` and ``error`` is meaningful: ``value`` when
    ``success`` is true, ``error`` otherwise.
    """
    success: bool
    value: Any = None
    error: Optional[PlanogramError] = None

    @classmethod
    def ok(cls, value: Any = None) -> 'OperationResult':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: PlanogramError) -> 'OperationResult':
        return cls(success=False, error=error)

    @property
    def kind(self):
        """Error kind of a failed result, None on success"""
        return getattr(self.error, 'kind', None)

    def unwrap(self) -> Any:
        """Return the value or raise the carried error"""
        if not self.success:
            raise self.error
        return self.value

    def get_summary(self) -> Dict[str, Any]:
        summary = {'success': self.success}
        if self.error is not None:
            summary['error'] = type(self.error).__name__
            summary['kind'] = self.kind.value if self.kind is not None else None
            summary['message'] = str(self.error)
        return summary
