"""
Unit tests - Progress events
============================
"""

from tripzz_agent.utils.progress import (
    emit_progress,
    get_progress_callback,
    reset_progress_callback,
    set_progress_callback,
)


class TestProgress:
    def test_events_reach_registered_callback(self):
        events = []
        token = set_progress_callback(events.append)
        try:
            emit_progress("weather", "Checking the weather in Goa...", 40, location="Goa")
            emit_progress("compose", "Writing your answer...", 140)
        finally:
            reset_progress_callback(token)

        assert events == [
            {"stage": "weather", "message": "Checking the weather in Goa...", "percent": 40, "location": "Goa"},
            {"stage": "compose", "message": "Writing your answer...", "percent": 100},
        ]
        assert get_progress_callback() is None

    def test_without_callback_only_logs(self):
        emit_progress("classify", "Understanding your message...", 10)

    def test_failing_callback_does_not_raise(self):
        def broken(event):
            raise RuntimeError("stream closed")

        token = set_progress_callback(broken)
        try:
            emit_progress("merge", "Stage: greeting", 20)
        finally:
            reset_progress_callback(token)
