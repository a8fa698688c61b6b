"""
CLI Host Tests

Covers:
1. Signal handling around the video command
2. Input file errors reported instead of raised

Run with:
    python -m pytest tests/test_main.py -v
"""

import argparse
import signal
from unittest.mock import MagicMock, patch

import pytest

import main
from conftest import make_config


class TestCancelHandlers:
    """SIGINT/SIGTERM during a video submit."""

    def test_handlers_installed(self):
        loop = MagicMock()
        panel = MagicMock()

        signals = main.install_cancel_handlers(loop, panel)

        assert set(signals) == {signal.SIGINT, signal.SIGTERM}
        installed = {c.args[0] for c in loop.add_signal_handler.call_args_list}
        assert installed == {signal.SIGINT, signal.SIGTERM}
        panel.cancel.assert_not_called()

    def test_first_signal_cancels_then_restores_default(self):
        """A second Ctrl-C must reach the default handler, e.g. while a key prompt blocks."""
        loop = MagicMock()
        panel = MagicMock()
        main.install_cancel_handlers(loop, panel)
        handler = loop.add_signal_handler.call_args_list[0].args[1]

        handler()

        panel.cancel.assert_called_once()
        removed = {c.args[0] for c in loop.remove_signal_handler.call_args_list}
        assert removed == {signal.SIGINT, signal.SIGTERM}


class TestThumbnailCommand:

    @pytest.mark.asyncio
    async def test_missing_reference_reported(self, tmp_path):
        args = argparse.Namespace(
            command="thumbnail",
            prompt="Shocked face",
            reference=str(tmp_path / "missing.jpg"),
            output=None,
        )

        with patch("main.get_config", return_value=make_config()), patch("main.notify") as notify:
            ok = await main.run_command(args)

        assert ok is False
        notify.assert_called_once()
        assert "Could not read reference image" in notify.call_args.args[0]
