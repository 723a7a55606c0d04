from unittest.mock import patch

from scheduling.configuration.monitor import log_event, log_exception, log_metric

class TestMonitor:
    @patch('scheduling.configuration.monitor.logger')
    def test_log_exception_keeps_the_traceback(self, mock_logger):
        try:
            raise ValueError("malformed document")
        except ValueError as e:
            error = e

        log_exception(error, {"operation": "cascade_cancel"})

        mock_logger.exception.assert_called_once()
        assert mock_logger.exception.call_args.kwargs["exc_info"] is error

    @patch('scheduling.configuration.monitor.logger')
    def test_log_event_and_metric(self, mock_logger):
        log_event("Booking confirmed successfully", {"booking_id": "booking123"})
        log_metric("cascade_cancellations", 2, {"booking_id": "booking123"})

        assert mock_logger.info.call_count == 2
        mock_logger.error.assert_not_called()
