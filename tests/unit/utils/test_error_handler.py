"""Tests unitarios para la jerarquía de excepciones y el agregador de errores."""

from app.utils.error_handler import (
    AppException,
    ErrorAggregator,
    ErrorCode,
    SyncException,
    create_error_response,
)


class TestErrorAggregator:
    def test_unique_messages_in_order(self):
        aggregator = ErrorAggregator()
        aggregator.add_error(SyncException("SKU 'A': Invalid", operation="export"))
        aggregator.add_error(ValueError("bad value"))
        aggregator.add_error(SyncException("SKU 'A': Invalid", operation="export"))

        assert aggregator.has_errors()
        assert aggregator.error_messages() == ["SKU 'A': Invalid", "ValueError: bad value"]
        assert aggregator.error_messages(limit=1) == ["SKU 'A': Invalid"]

    def test_summary(self):
        aggregator = ErrorAggregator()
        for _ in range(3):
            aggregator.increment_processed()
        aggregator.add_error(RuntimeError("boom"))

        summary = aggregator.get_summary()

        assert summary["total_processed"] == 3
        assert summary["error_count"] == 1
        assert summary["success_count"] == 2


class TestErrorResponse:
    def test_plain_exception_is_wrapped(self):
        response = create_error_response(KeyError("id"))

        assert response["error"] is True
        assert response["message"].startswith("KeyError")

    def test_sync_exception_code(self):
        error = SyncException("Order not found in sync status.", operation="submit", error_code=ErrorCode.ORDER_NOT_BOUND)

        assert isinstance(error, AppException)
        assert create_error_response(error)["error_code"] == ErrorCode.ORDER_NOT_BOUND.value
