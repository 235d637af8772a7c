"""Integration domain services."""

from .condition_evaluator import evaluate_condition, parse_condition
from .data_transformation import (
    DataTransformationService,
    TransformationReport,
    TransformationResult,
    TransformationStatistics,
)
from .expression_evaluator import ExpressionEvaluator, evaluate_expression, variables_in
from .field_transformer import CustomFunction, FieldTransformer
from .integration_execution import (
    ConnectionTestResult,
    ExecutionContext,
    ExecutionErrorDetail,
    ExecutionMetrics,
    ExecutionResult,
    IntegrationExecutionService,
    IntegrationHealth,
    IntegrationValidationResult,
    classify_error,
    is_recoverable,
)

__all__ = [
    "ConnectionTestResult",
    "CustomFunction",
    "DataTransformationService",
    "ExecutionContext",
    "ExecutionErrorDetail",
    "ExecutionMetrics",
    "ExecutionResult",
    "ExpressionEvaluator",
    "FieldTransformer",
    "IntegrationExecutionService",
    "IntegrationHealth",
    "IntegrationValidationResult",
    "TransformationReport",
    "TransformationResult",
    "TransformationStatistics",
    "classify_error",
    "evaluate_condition",
    "evaluate_expression",
    "is_recoverable",
    "parse_condition",
    "variables_in",
]
