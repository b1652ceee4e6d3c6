"""
Unit tests for Pipe.

Tests ordering of handlers and resumption of a pipe after new
handlers are joined.
"""

from api_connector.pipe import Pipe


class TestPipe:
    """Test Pipe processing."""

    def test_handlers_are_called_sequentially(self) -> None:
        """Test each handler receives the previous handler's output."""
        response = {"data": {"inner": "value"}}

        pipe = Pipe()
        pipe.join(lambda response: response["data"])
        pipe.join(lambda data: data["inner"])
        pipe.join(lambda inner: inner.upper())

        assert pipe.process(response) == "VALUE"
        assert pipe.value == "VALUE"

    def test_empty_pipe_returns_input(self) -> None:
        """Test an empty pipe passes its input through."""
        pipe = Pipe()
        assert pipe.process(42) == 42
        assert pipe.started

    def test_join_after_process_applies_only_new_handler(self) -> None:
        """Test a handler joined later runs on the last computed value."""
        calls = []
        pipe = Pipe()
        pipe.join(lambda x: calls.append("first") or x + 1)

        assert pipe.process(1) == 2

        pipe.join(lambda x: calls.append("second") or x * 10)
        assert pipe.process() == 20
        assert calls == ["first", "second"]

    def test_new_input_ignored_after_first_process(self) -> None:
        """Test the initial input is only used on the first process."""
        pipe = Pipe()
        pipe.join(lambda x: x + 1)
        pipe.process(1)

        pipe.join(lambda x: x * 2)
        assert pipe.process(100) == 4

    def test_join_after_processing_empty_pipe(self) -> None:
        """Test a handler joined to a processed empty pipe sees the input."""
        pipe = Pipe()
        pipe.process("seed")
        pipe.join(lambda x: x + "!")

        assert pipe.process() == "seed!"

    def test_process_without_new_handlers_is_idempotent(self) -> None:
        """Test processing twice does not rerun handlers."""
        calls = []
        pipe = Pipe()
        pipe.join(lambda x: calls.append(x) or x)

        pipe.process("a")
        pipe.process("b")
        assert calls == ["a"]

    def test_reset_replays_from_first_handler(self) -> None:
        """Test reset makes the next process start over with new input."""
        pipe = Pipe()
        pipe.join(lambda x: x + 1)
        pipe.join(lambda x: x * 2)

        assert pipe.process(1) == 4
        pipe.reset()
        assert not pipe.started
        assert pipe.value is None
        assert pipe.process(5) == 12

    def test_raising_handler_is_not_replayed(self) -> None:
        """Test a handler that raised is skipped by the next process."""
        calls = []

        def boom(x):
            calls.append("boom")
            raise ValueError("boom")

        pipe = Pipe()
        pipe.join(boom)

        try:
            pipe.process(1)
        except ValueError:
            pass

        pipe.join(lambda x: calls.append("after") or x)
        pipe.process()
        assert calls == ["boom", "after"]

    def test_len(self) -> None:
        """Test len reports the number of handlers."""
        pipe = Pipe()
        assert len(pipe) == 0
        pipe.join(lambda x: x)
        pipe.join(lambda x: x)
        assert len(pipe) == 2
