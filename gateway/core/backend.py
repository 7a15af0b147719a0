import httpx
import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class BackendError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Backend(Protocol):
    async def init(self) -> None: ...
    async def aclose(self) -> None: ...

    async def register_user(self, user: Any) -> Any: ...
    async def login_user(self, credentials: Any) -> Any: ...
    async def get_user_projects(self, user_id: str) -> Any: ...
    async def create_project(self, user_id: str, project: Any) -> Any: ...
    async def get_project(self, user_id: str, project_id: str) -> Any: ...
    async def delete_project(self, user_id: str, project_id: str) -> Any: ...
    async def configure_project_backend(self, user_id: str, project_id: str, config: Any) -> Any: ...
    async def test_project_backend(self, user_id: str, project_id: str, params: Any) -> Any: ...
    async def get_project_data(self, user_id: str, project_id: str, query: Any) -> Any: ...
    async def store_project_data(self, user_id: str, project_id: str, data: Any) -> Any: ...
    async def health_check(self) -> Any: ...


class HttpBackend:
    """Backend service reached over HTTP.

    Every operation is ``POST {base_url}/rpc/{operation}`` with its named
    params as a JSON object. A 2xx JSON body is the result; anything else
    raises ``BackendError`` with the backend's own message when it sent one.
    No retries: a failed call surfaces to the caller immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def init(self) -> None:
        logger.info(f"Connecting to backend at {self.base_url}")
        status = await self.health_check()
        logger.info(f"Backend ready: {status}")

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _call(self, operation: str, **params: Any) -> Any:
        url = f"{self.base_url}/rpc/{operation}"
        try:
            response = await self.client.post(url, json=params)
        except httpx.RequestError as e:
            logger.error(f"Request error to {url}: {str(e)}")
            raise BackendError(f"Backend unreachable: {operation}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            message = payload.get("message") if isinstance(payload, dict) else None
            logger.warning(f"Backend {operation} failed ({response.status_code}): {message}")
            raise BackendError(
                message or f"Backend error ({response.status_code})",
                status_code=response.status_code,
            )

        return payload

    async def register_user(self, user: Any) -> Any:
        return await self._call("registerUser", user=user)

    async def login_user(self, credentials: Any) -> Any:
        return await self._call("loginUser", credentials=credentials)

    async def get_user_projects(self, user_id: str) -> Any:
        return await self._call("getUserProjects", userId=user_id)

    async def create_project(self, user_id: str, project: Any) -> Any:
        return await self._call("createProject", userId=user_id, project=project)

    async def get_project(self, user_id: str, project_id: str) -> Any:
        return await self._call("getProject", userId=user_id, projectId=project_id)

    async def delete_project(self, user_id: str, project_id: str) -> Any:
        return await self._call("deleteProject", userId=user_id, projectId=project_id)

    async def configure_project_backend(self, user_id: str, project_id: str, config: Any) -> Any:
        return await self._call(
            "configureProjectBackend", userId=user_id, projectId=project_id, config=config
        )

    async def test_project_backend(self, user_id: str, project_id: str, params: Any) -> Any:
        return await self._call(
            "testProjectBackend", userId=user_id, projectId=project_id, params=params
        )

    async def get_project_data(self, user_id: str, project_id: str, query: Any) -> Any:
        return await self._call("getProjectData", userId=user_id, projectId=project_id, query=query)

    async def store_project_data(self, user_id: str, project_id: str, data: Any) -> Any:
        return await self._call("storeProjectData", userId=user_id, projectId=project_id, data=data)

    async def health_check(self) -> Any:
        return await self._call("healthCheck")
