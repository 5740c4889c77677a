"""Dialect-aware SQL functions used by search ordering."""

from typing import Any

from sqlalchemy import Integer
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class locate(FunctionElement):
    """1-based position of ``needle`` inside ``haystack``; 0 when absent.

    Compiles to INSTR on SQLite and generic backends, STRPOS on PostgreSQL,
    LOCATE on MySQL/MariaDB and CHARINDEX on SQL Server.
    """

    type = Integer()
    name = "locate"
    inherit_cache = True

    def __init__(self, needle: Any, haystack: Any, **kwargs: Any):
        super().__init__(needle, haystack, **kwargs)


def _arguments(element: locate, compiler, **kw) -> tuple[str, str]:
    needle, haystack = list(element.clauses)
    return compiler.process(needle, **kw), compiler.process(haystack, **kw)


@compiles(locate)
def _compile_locate_default(element, compiler, **kw):
    needle, haystack = _arguments(element, compiler, **kw)
    return f"INSTR({haystack}, {needle})"


@compiles(locate, "postgresql")
def _compile_locate_postgresql(element, compiler, **kw):
    needle, haystack = _arguments(element, compiler, **kw)
    return f"STRPOS({haystack}, {needle})"


@compiles(locate, "mysql")
@compiles(locate, "mariadb")
def _compile_locate_mysql(element, compiler, **kw):
    needle, haystack = _arguments(element, compiler, **kw)
    return f"LOCATE({needle}, {haystack})"


@compiles(locate, "mssql")
def _compile_locate_mssql(element, compiler, **kw):
    needle, haystack = _arguments(element, compiler, **kw)
    return f"CHARINDEX({needle}, {haystack})"
