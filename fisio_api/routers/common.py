import logging
from typing import Sequence

from fisio_api.database import QueryResult, get_db
from fisio_api.errors import BackendFailure

logger = logging.getLogger(__name__)


async def run_query(
    operation: str,
    failure_message: str,
    query: str,
    params: Sequence | None = None,
) -> QueryResult:
    """Execute one statement, turning any database error into BackendFailure.

    ``{regex_op}`` in the query is replaced by the backend's case-insensitive
    regex operator, ``{date_param}`` by a placeholder cast to DATE in SQL.
    """
    try:
        db = await get_db()
        sql = query.replace("{regex_op}", db.regex_op).replace("{date_param}", db.date_param)
        return await db.execute(sql, params)
    except Exception as e:
        logger.error("%s failed: %s", operation, e, exc_info=True)
        raise BackendFailure(failure_message) from e
