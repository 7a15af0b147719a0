import inspect
import logging
from typing import Any
from .context import RequestContext
from .errors import RouteNotMapped
from .route_table import RouteTable, route_key

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, route_table: RouteTable):
        self.route_table = route_table

    async def dispatch(self, method: str, pattern: str, context: RequestContext) -> Any:
        key = route_key(method, pattern)
        logger.info(f"route={key} user={context.user_id or 'anonymous'}")

        entry = self.route_table.get(method, pattern)
        if entry is None:
            logger.error(f"Route not found in table: {key}")
            raise RouteNotMapped(key)

        result = entry.operation(context)
        if inspect.isawaitable(result):
            result = await result
        return result
