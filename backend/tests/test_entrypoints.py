"""
Tests for the CLI entrypoints in backend/tradeq/server.py and backend/tradeq/worker.py
"""

import pytest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from tradeq import server, worker


class TestServerArgs:

    def test_defaults(self):
        args = server.parse_args([])
        assert args.db is None
        assert args.listen is None
        assert args.worker is False

    def test_flags(self):
        args = server.parse_args(["--db", "trades.db", "--listen", "9090", "--worker"])
        assert args.db == "trades.db"
        assert args.listen == "9090"
        assert args.worker is True


class TestWorkerArgs:

    def test_poll_is_float(self):
        args = worker.parse_args(["--poll", "0.25"])
        assert args.poll == 0.25

    def test_negative_poll_is_rejected(self):
        with patch("tradeq.worker.asyncio.run") as run:
            assert worker.main(["--poll", "-1"]) == 2
        run.assert_not_called()

    def test_unopenable_database_is_fatal(self):
        def _fail(coro):
            coro.close()
            raise OperationalError("connect", {}, Exception("unable to open database file"))

        with patch("tradeq.worker.asyncio.run", side_effect=_fail):
            assert worker.main(["--poll", "0.1"]) == 1


class TestServerListenPort:

    def test_colon_prefixed_port(self):
        with patch("tradeq.server.uvicorn.run") as run, patch("tradeq.server.settings") as settings:
            settings.log_level = "INFO"
            assert server.main(["--listen", ":9090"]) == 0
        assert settings.port == 9090
        run.assert_called_once()

    def test_non_numeric_port_is_fatal(self):
        with patch("tradeq.server.uvicorn.run") as run:
            assert server.main(["--listen", "http"]) == 2
        run.assert_not_called()


class TestWorkerDrain:

    def test_drain_flag(self):
        assert worker.parse_args(["--drain"]).drain is True
        assert worker.parse_args([]).drain is False

    @pytest.mark.asyncio
    async def test_drain_processes_backlog_and_returns(
        self, monkeypatch, async_engine, session_maker, add_queue_items,
    ):
        from tradeq import database
        from tradeq.models import AccountStats

        monkeypatch.setattr(database, "engine", async_engine)
        monkeypatch.setattr(database, "async_session_maker", session_maker)
        await add_queue_items({"account": "alice"}, {"account": "alice"}, {"account": "bob"})

        await worker.run_worker(0, "drain-test", drain=True)

        async with session_maker() as session:
            alice = await session.get(AccountStats, "alice")
            bob = await session.get(AccountStats, "bob")
        assert alice.trades == 2
        assert bob.trades == 1
