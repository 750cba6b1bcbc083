"""
    HTTP‑эндпоинты JSON API дашборда.

    Каждый эндпоинт проверяет параметры пути и запроса, вызывает
    `ScalingoClient` и возвращает модели дашборда. Ошибки API Scalingo
    превращаются в ответы 502 (или 404, если ресурс не найден), при этом
    подробности ошибки показываются только в режиме отладки.
"""

import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from scalingo_dashboard.config import Settings
from scalingo_dashboard.errors import ConfigurationError, InvalidAction, NotFoundError, ScalingoAPIError
from scalingo_dashboard.models.application import ApplicationsPage
from scalingo_dashboard.models.deployment import DeploymentOutput, DeploymentsPage
from scalingo_dashboard.services.domains import domain_url, primary_domain
from scalingo_dashboard.services.pagination import Paginator
from scalingo_dashboard.services.scalingo_client import ScalingoClient

logger = logging.getLogger(__name__)
router = APIRouter()

# UUID, ObjectId MongoDB или буквенно‑цифровой идентификатор
APP_ID_PATTERN = re.compile(
    r'^[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}$'
    r'|^[a-fA-F0-9]{24}$'
    r'|^[a-zA-Z0-9_-]{6,50}$'
)
DEPLOYMENT_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

MAX_PAGE = 1000
MAX_LIMIT = 100
MAX_LOG_LINES = 10000

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


class ActionRequest(BaseModel):
    action: str


def get_settings() -> Settings:
    return Settings.from_env()


def get_client(settings: Settings = Depends(get_settings)) -> ScalingoClient:
    return ScalingoClient(settings)


def validate_app_id(app_id: str) -> str:
    if not APP_ID_PATTERN.match(app_id):
        raise HTTPException(status_code=400, detail="Invalid application ID format")
    return app_id


def validate_range(name: str, value: int, maximum: int) -> int:
    if not 1 <= value <= maximum:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name} parameter (must be between 1 and {maximum})",
        )
    return value


def upstream_error(exc: Exception, settings: Settings, what: str) -> HTTPException:
    """Переводит исключение клиента в HTTPException для ответа."""
    if isinstance(exc, ConfigurationError):
        logger.error("Ошибка конфигурации: %s", exc)
        return HTTPException(status_code=500, detail="Dashboard is not configured")
    logger.exception("Ошибка при запросе %s к Scalingo: %s", what, exc)
    detail = f"Failed to fetch {what}: {exc}" if settings.debug else "Upstream Scalingo API error"
    return HTTPException(status_code=502, detail=detail)


@router.get("/applications", response_model=ApplicationsPage)
async def list_applications(
    page: int = 1,
    limit: int = 10,
    client: ScalingoClient = Depends(get_client),
):
    """
    Список приложений с постраничным выводом.

    API Scalingo отдаёт все приложения сразу, поэтому страница
    вырезается на нашей стороне через `Paginator.slice`.
    """
    validate_range("page", page, MAX_PAGE)
    validate_range("limit", limit, MAX_LIMIT)
    try:
        applications = await client.list_applications()
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "applications")
    items, pagination = Paginator.slice(applications, page, limit)
    return ApplicationsPage(applications=items, meta={"pagination": pagination})


@router.get("/applications/{app_id}")
async def get_application(app_id: str, client: ScalingoClient = Depends(get_client)):
    validate_app_id(app_id)
    try:
        application = await client.get_application(app_id)
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "application")
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found")
    return {"application": application}


@router.post("/applications/{app_id}")
async def perform_action(app_id: str, body: ActionRequest, client: ScalingoClient = Depends(get_client)):
    """
    Выполняет действие над приложением: ``start``, ``stop`` или ``restart``.
    """
    validate_app_id(app_id)
    try:
        await client.perform_action(app_id, body.action)
    except InvalidAction:
        raise HTTPException(status_code=400, detail="Invalid action")
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, f"{body.action} action")
    return {"success": True, "message": f"Application {body.action} initiated"}


@router.get("/applications/{app_id}/logs")
async def get_logs(app_id: str, lines: int | None = None, client: ScalingoClient = Depends(get_client)):
    validate_app_id(app_id)
    if lines is not None:
        validate_range("lines", lines, MAX_LOG_LINES)
    try:
        logs = await client.fetch_logs(app_id, lines)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "logs")
    return {"logs": logs}


@router.get("/applications/{app_id}/deployments", response_model=DeploymentsPage)
async def get_deployments(
    app_id: str,
    response: Response,
    page: int = 1,
    client: ScalingoClient = Depends(get_client),
):
    validate_app_id(app_id)
    validate_range("page", page, MAX_PAGE)
    try:
        deployments = await client.fetch_deployments(app_id, page)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "deployments")
    response.headers.update(SECURITY_HEADERS)
    return deployments


@router.get("/applications/{app_id}/deployments/{deployment_id}/output", response_model=DeploymentOutput)
async def get_deployment_output(
    app_id: str,
    deployment_id: str,
    response: Response,
    client: ScalingoClient = Depends(get_client),
):
    validate_app_id(app_id)
    if not DEPLOYMENT_ID_PATTERN.match(deployment_id):
        raise HTTPException(status_code=400, detail="Invalid deployment ID")
    try:
        output = await client.fetch_deployment_output(app_id, deployment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "deployment output")
    response.headers.update(SECURITY_HEADERS)
    return output


@router.get("/applications/{app_id}/domains")
async def get_domains(app_id: str, client: ScalingoClient = Depends(get_client)):
    """
    Домены приложения вместе с основным доменом и его адресом.
    """
    validate_app_id(app_id)
    try:
        domains = await client.fetch_domains(app_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")
    except (ScalingoAPIError, ConfigurationError) as e:
        raise upstream_error(e, client.settings, "domains")
    primary = primary_domain(domains)
    return {
        "domains": domains,
        "primary_domain": primary,
        "primary_url": domain_url(primary) if primary else None,
    }
