from __future__ import annotations

from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from ..core.errors import StorageFailure
from .session import session_scope

T = TypeVar("T")


class StorageGateway:
    """Bridge from async code to the synchronous CRUD helpers.

    ``run(fn, *args)`` opens a fresh ORM session on a worker thread, calls
    ``fn(db, *args)`` and returns its result. The calling coroutine suspends
    meanwhile, so other connections and the broadcaster keep running. Any
    ``SQLAlchemyError`` surfaces as ``StorageFailure``.

    ``fn`` must return plain data (dicts, pydantic models, ids); ORM rows are
    detached once the session closes.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with session_scope(self._session_factory) as db:
            return fn(db, *args, **kwargs)

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await run_in_threadpool(self._call, fn, *args, **kwargs)
        except SQLAlchemyError as exc:
            raise StorageFailure(str(exc)) from exc


__all__ = ["StorageGateway"]
