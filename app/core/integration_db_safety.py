from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url

DEFAULT_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "group_buy_postgres"})

REASON_NOT_POSTGRES = "Integration tests support only PostgreSQL test databases."
REASON_EMPTY_NAME = "Database name is empty."
REASON_NOT_TEST_NAME = "Database name must clearly indicate a test database (contain 'test')."
REASON_REMOTE_HOST = "Host is not in allowed local integration-test hosts."


@dataclass(frozen=True, slots=True)
class IntegrationDbSafetyResult:
    is_safe: bool
    reason: str
    database_name: str
    host: str


def _first_violation(url: URL, *, db_name: str, host: str, allowed_hosts: frozenset[str]) -> str | None:
    if url.get_backend_name() != "postgresql":
        return REASON_NOT_POSTGRES
    if not db_name:
        return REASON_EMPTY_NAME
    if "test" not in db_name.lower():
        return REASON_NOT_TEST_NAME
    if host not in allowed_hosts:
        return REASON_REMOTE_HOST
    return None


def assess_integration_db_safety(
    database_url: str,
    *,
    extra_hosts: Iterable[str] = (),
) -> IntegrationDbSafetyResult:
    """Decide whether ``database_url`` may be truncated by the integration suite."""
    url = make_url(database_url)
    db_name = (url.database or "").strip()
    host = (url.host or "").strip().lower()
    allowed_hosts = DEFAULT_LOCAL_HOSTS | {item.strip().lower() for item in extra_hosts}
    violation = _first_violation(url, db_name=db_name, host=host, allowed_hosts=allowed_hosts)
    return IntegrationDbSafetyResult(
        is_safe=violation is None,
        reason=violation or "ok",
        database_name=db_name,
        host=host,
    )


def assert_safe_integration_db(database_url: str, *, extra_hosts: Iterable[str] = ()) -> None:
    result = assess_integration_db_safety(database_url, extra_hosts=extra_hosts)
    if result.is_safe:
        return
    raise RuntimeError(
        "Refusing to run integration tests with destructive TRUNCATE.\n"
        f"Reason: {result.reason}\n"
        f"Resolved DB: name='{result.database_name}' host='{result.host}'\n"
        "Required: use a dedicated local PostgreSQL test DB, e.g. 'group_buy_test'."
    )
