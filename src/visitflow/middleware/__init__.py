"""HTTP middleware for the visitflow API."""

from .operator_middleware import OperatorContext, OperatorMiddleware
from .performance_middleware import PerformanceMiddleware
from .request_id_middleware import RequestIDMiddleware

__all__ = ["OperatorContext", "OperatorMiddleware", "PerformanceMiddleware", "RequestIDMiddleware"]
