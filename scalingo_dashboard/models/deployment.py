from typing import List

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    """
    Метаданные страницы списка.

    Поля:
        current_page: запрошенная страница (не ограничивается сверху);
        prev_page: предыдущая страница или ``None`` на первой странице;
        next_page: следующая страница или ``None`` на последней;
        total_pages: число страниц, минимум 1;
        total_count: общее число элементов.
    """

    current_page: int
    prev_page: int | None = None
    next_page: int | None = None
    total_pages: int
    total_count: int


class PaginationMeta(BaseModel):
    pagination: Pagination


class Pusher(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    id: str | None = None
    username: str | None = None


class Deployment(BaseModel):
    """
    Один деплой приложения в том виде, в каком его отдаёт API Scalingo.

    Статус обычно один из ``success``, ``build-error``, ``crashed``,
    ``timeout`` или ``aborted``, но промежуточные статусы (``building``,
    ``pushing`` и т.п.) тоже пропускаются как есть.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    app_id: str = ""
    created_at: str
    # Пока деплой собирается, часть полей приходит как null
    git_ref: str | None = None
    status: str
    image_size: int | None = None
    stack_base_image: str | None = None
    pusher: Pusher | None = None


class DeploymentsPage(BaseModel):
    deployments: List[Deployment]
    meta: PaginationMeta


class DeploymentOutput(BaseModel):
    # Сырой вывод сборки, как есть
    output: str
