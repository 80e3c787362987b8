"""Pytest configuration and shared fixtures for pg_importdoc tests."""

from types import SimpleNamespace

import psycopg
import pytest
from psycopg.pq import ExecStatus

from pg_importdoc.config import RunConfig


class FakeResult:
    """Stands for a libpq PGresult."""

    def __init__(self, status, rows=(), error=b''):
        self.status = status
        self._rows = [list(row) for row in rows]
        self.error_message = error
        self.cleared = False

    @property
    def ntuples(self):
        return len(self._rows)

    @property
    def nfields(self):
        return len(self._rows[0]) if self._rows else 0

    def get_value(self, row, column):
        return self._rows[row][column]

    def clear(self):
        self.cleared = True


class FakePGconn:
    """
    Records the commands sent through the low level libpq interface.

    Each scripted answer is either a FakeResult or an exception to raise.
    """

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []

    def _next(self):
        if not self.results:
            return FakeResult(ExecStatus.COMMAND_OK)
        answer = self.results.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def exec_(self, command):
        self.calls.append(('exec', command))
        return self._next()

    def exec_params(self, command, values, types=None, formats=None):
        self.calls.append(('exec_params', command, values, types, formats))
        return self._next()


class EncodingWithoutCodec:
    """Connection info of a session whose client encoding has no python codec."""

    def __init__(self, name='EUC_TW'):
        self.name = name

    @property
    def encoding(self):
        raise psycopg.NotSupportedError(f'codec not available in Python: {self.name!r}')


def fake_connection(*results, info=None):
    return SimpleNamespace(
        pgconn=FakePGconn(results),
        info=info or SimpleNamespace(encoding='utf-8'),
    )


@pytest.fixture
def make_config():
    def factory(**kwargs):
        kwargs.setdefault('database', 'mydb')
        kwargs.setdefault('command', 'INSERT INTO docs(body) VALUES ($1)')
        return RunConfig(**kwargs)
    return factory
