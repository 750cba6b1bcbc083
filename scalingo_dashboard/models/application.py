from typing import List

from pydantic import BaseModel, ConfigDict

from scalingo_dashboard.models.deployment import PaginationMeta


class Application(BaseModel):
    """
    Приложение, размещённое на Scalingo.

    Статус обычно ``running``, ``stopped``, ``deploying``, ``scaling`` или
    ``restarting``. Остальные поля ответа API, которые дашборду не нужны,
    отбрасываются.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    created_at: str
    last_deployed_at: str | None = None
    url: str | None = None
    status: str
    region: str = ""
    git_url: str | None = None
    stack: str | None = None
    instances: int | None = None


class ApplicationsPage(BaseModel):
    applications: List[Application]
    meta: PaginationMeta
