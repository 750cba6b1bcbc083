"""
Клиент для взаимодействия с API Scalingo.

Модуль обменивает персональный токен API на Bearer‑токен, выполняет
запросы к API региона и превращает ответы в модели дашборда. Логи
приходят обычным текстом и разбираются `LogParser`, метаданные страниц
деплоев при необходимости досчитываются `Paginator`. При ошибках сети
или HTTP генерируются исключения `ScalingoAPIError`, чтобы вызывающий
код мог корректно обработать проблемы.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Tuple

import aiohttp
from pydantic import ValidationError

from scalingo_dashboard.config import Settings
from scalingo_dashboard.errors import ConfigurationError, InvalidAction, NotFoundError, ScalingoAPIError
from scalingo_dashboard.models.application import Application
from scalingo_dashboard.models.deployment import DeploymentOutput, DeploymentsPage, Pagination
from scalingo_dashboard.models.domain import Domain
from scalingo_dashboard.models.log_entry import LogEntry
from scalingo_dashboard.services.log_parser import LogParser
from scalingo_dashboard.services.pagination import InvalidArgument, Paginator

logger = logging.getLogger(__name__)

TOKEN_EXCHANGE_PATH = "/v1/tokens/exchange"
APPLICATION_ACTIONS = ("start", "stop", "restart")
# Размер страницы, который запрашиваем у API при листинге деплоев
DEPLOYMENTS_PER_PAGE = 20

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class ScalingoClient:
    """
    Асинхронный клиент API Scalingo.

    Параметры доступа передаются через объект `Settings`. Bearer‑токен
    запрашивается при первом обращении и хранится в экземпляре клиента,
    поэтому клиент стоит создавать на время обработки одного запроса
    или одной задачи.

    Атрибуты:
        settings (Settings): адреса API и персональный токен.
        bearer_token (str | None): токен, полученный при обмене.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.from_env()
        self.bearer_token: str | None = None

    def build_url(self, endpoint: str) -> str:
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.settings.api_url}{endpoint}"

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str] | None = None,
        params: Dict[str, Any] | None = None,
        auth: aiohttp.BasicAuth | None = None,
    ) -> Tuple[int, str]:
        """
        Выполняет один HTTP‑запрос и возвращает пару (статус, тело).

        Статус не проверяется: это делает вызывающий метод. Сетевые ошибки
        и таймауты оборачиваются в `ScalingoAPIError`.
        """
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        try:
            # Создаём HTTP‑сессию; закрывается автоматически.
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers, params=params, auth=auth) as resp:
                    return resp.status, await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScalingoAPIError(f"Не удалось выполнить запрос {method} {url}: {e}") from e

    async def get_bearer_token(self) -> str:
        """
        Обменивает персональный токен API на Bearer‑токен.

        :raises ConfigurationError: если `SCALINGO_API_TOKEN` не задан.
        :raises ScalingoAPIError: если сервер авторизации вернул ошибку.
        """
        if self.bearer_token:
            return self.bearer_token
        if not self.settings.api_token:
            raise ConfigurationError("Не задан SCALINGO_API_TOKEN в переменных окружения")

        status, body = await self._send(
            "POST",
            f"{self.settings.auth_url}{TOKEN_EXCHANGE_PATH}",
            headers=JSON_HEADERS,
            # Basic‑аутентификация: пустой логин, токен API в качестве пароля
            auth=aiohttp.BasicAuth("", self.settings.api_token),
        )
        if not 200 <= status < 300:
            raise ScalingoAPIError(f"Обмен токена Scalingo завершился ошибкой: {status}", status=status)
        token = self._decode_json(body).get("token")
        if not token:
            raise ScalingoAPIError("Сервер авторизации Scalingo не вернул токен", status=status)
        self.bearer_token = token
        return token

    async def auth_headers(self) -> Dict[str, str]:
        token = await self.get_bearer_token()
        return {**JSON_HEADERS, "Authorization": f"Bearer {token}"}

    async def request(self, method: str, endpoint: str, params: Dict[str, Any] | None = None) -> str:
        """
        Выполняет авторизованный запрос к API Scalingo и возвращает тело ответа.

        :raises NotFoundError: при ответе 404.
        :raises ScalingoAPIError: при любом другом ответе вне 2xx.
        """
        url = self.build_url(endpoint)
        status, body = await self._send(method, url, headers=await self.auth_headers(), params=params)
        if status == 404:
            raise NotFoundError(f"Ресурс не найден: {endpoint}")
        if not 200 <= status < 300:
            logger.warning("Scalingo API %s %s вернул %d", method, endpoint, status)
            raise ScalingoAPIError(f"Ошибка API Scalingo: {status}", status=status)
        return body

    async def request_json(self, method: str, endpoint: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        return self._decode_json(await self.request(method, endpoint, params=params))

    @staticmethod
    def _decode_json(body: str) -> Dict[str, Any]:
        if not body.strip():
            return {}
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise ScalingoAPIError(f"Некорректный JSON в ответе Scalingo: {e}") from e
        if not isinstance(data, dict):
            raise ScalingoAPIError("Ответ Scalingo не является JSON-объектом")
        return data

    @staticmethod
    def _unexpected_payload(what: str, error: Exception) -> ScalingoAPIError:
        logger.warning("Неожиданный формат ответа Scalingo (%s): %s", what, error)
        return ScalingoAPIError(f"Неожиданный формат ответа Scalingo ({what}): {error}")

    async def list_applications(self) -> List[Application]:
        data = await self.request_json("GET", "/v1/apps")
        try:
            return [Application.model_validate(app) for app in data.get("apps") or []]
        except ValidationError as e:
            raise self._unexpected_payload("apps", e) from e

    async def get_application(self, app_id: str) -> Application | None:
        """Возвращает приложение или ``None``, если его нет."""
        try:
            data = await self.request_json("GET", f"/v1/apps/{app_id}")
        except NotFoundError:
            return None
        app = data.get("app")
        try:
            return Application.model_validate(app) if app else None
        except ValidationError as e:
            raise self._unexpected_payload("app", e) from e

    async def fetch_logs(self, app_id: str, lines: int | None = None) -> List[LogEntry]:
        """
        Загружает последние строки лога приложения.

        Сначала API возвращает временную ссылку `logs_url`, затем по ней
        скачивается текст логов (параметр ``n`` задаёт число строк), который
        разбирается `LogParser`.
        """
        lines = lines or self.settings.log_lines
        data = await self.request_json("GET", f"/v1/apps/{app_id}/logs")
        logs_url = data.get("logs_url")
        if not logs_url:
            logger.info("Scalingo не вернул logs_url для приложения %s", app_id)
            return []

        status, logs_text = await self._send("GET", logs_url, params={"n": lines})
        if not 200 <= status < 300:
            raise ScalingoAPIError(f"Не удалось загрузить логи: {status}", status=status)
        entries = LogParser.parse_logs(logs_text)
        logger.info("Получено %d записей лога для приложения %s", len(entries), app_id)
        return entries

    async def perform_action(self, app_id: str, action: str) -> bool:
        """
        Запускает, останавливает или перезапускает приложение.

        :raises InvalidAction: для действия вне ``start``/``stop``/``restart``;
            запрос в этом случае не отправляется.
        """
        if action not in APPLICATION_ACTIONS:
            raise InvalidAction(f"Неизвестное действие: {action}")
        await self.request("POST", f"/v1/apps/{app_id}/{action}")
        logger.info("Действие %s для приложения %s принято", action, app_id)
        return True

    async def fetch_deployments(self, app_id: str, page: int = 1) -> DeploymentsPage:
        data = await self.request_json(
            "GET",
            f"/v1/apps/{app_id}/deployments",
            params={"page": page, "per_page": DEPLOYMENTS_PER_PAGE},
        )
        deployments = data.get("deployments") or []
        meta = data.get("meta") or {}
        try:
            if not isinstance(meta, dict) or not isinstance(deployments, list):
                raise InvalidArgument("поля meta и deployments должны быть объектом и списком")
            if meta.get("pagination"):
                pagination = Pagination.model_validate(meta["pagination"])
            else:
                # Старые ответы API содержат только total_count либо вообще без meta
                total_count = meta.get("total_count")
                if total_count is None:
                    total_count = len(deployments)
                pagination = Paginator.paginate(total_count, page, DEPLOYMENTS_PER_PAGE)
            return DeploymentsPage.model_validate({
                "deployments": deployments,
                "meta": {"pagination": pagination},
            })
        except (ValidationError, InvalidArgument) as e:
            raise self._unexpected_payload("deployments", e) from e

    async def fetch_deployment_output(self, app_id: str, deployment_id: str) -> DeploymentOutput:
        try:
            # Ответ приходит обычным текстом, не JSON
            output = await self.request("GET", f"/v1/apps/{app_id}/deployments/{deployment_id}/output")
        except NotFoundError as e:
            raise NotFoundError("Deployment not found or output not available") from e
        return DeploymentOutput(output=output)

    async def fetch_domains(self, app_id: str) -> List[Domain]:
        data = await self.request_json("GET", f"/v1/apps/{app_id}/domains")
        try:
            return [Domain.model_validate(domain) for domain in data.get("domains") or []]
        except ValidationError as e:
            raise self._unexpected_payload("domains", e) from e
