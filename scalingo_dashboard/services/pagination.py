"""
Расчёт метаданных постраничного вывода для списков деплоев и приложений.
"""

from typing import List, Sequence, Tuple, TypeVar

from scalingo_dashboard.models.deployment import Pagination

T = TypeVar("T")


class InvalidArgument(ValueError):
    """Некорректные аргументы пагинации (отрицательное число, нулевая страница и т.п.)."""


def _require_int(name: str, value: int, minimum: int) -> None:
    # bool является подклассом int, но страницей быть не может
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} должен быть целым числом, получено {value!r}")
    if value < minimum:
        raise InvalidArgument(f"{name} должен быть не меньше {minimum}, получено {value}")


class Paginator:
    @staticmethod
    def paginate(total_count: int, requested_page: int, page_size: int) -> Pagination:
        """
        Вычисляет метаданные страницы по общему числу элементов.

        Запрошенная страница возвращается как есть, даже если она больше
        `total_pages`: в этом случае `next_page` равен ``None``, а
        `prev_page` указывает на предыдущую по номеру страницу.

        :param total_count: общее число элементов, ``>= 0``.
        :param requested_page: номер страницы, ``>= 1``.
        :param page_size: размер страницы, ``>= 1``.
        :raises InvalidArgument: при нарушении ограничений выше.
        """
        _require_int("total_count", total_count, 0)
        _require_int("requested_page", requested_page, 1)
        _require_int("page_size", page_size, 1)

        # Округление вверх в целых числах
        total_pages = max(1, -(-total_count // page_size))
        return Pagination(
            current_page=requested_page,
            prev_page=requested_page - 1 if requested_page > 1 else None,
            next_page=requested_page + 1 if requested_page < total_pages else None,
            total_pages=total_pages,
            total_count=total_count,
        )

    @staticmethod
    def slice(items: Sequence[T], requested_page: int, page_size: int) -> Tuple[List[T], Pagination]:
        """
        Возвращает элементы запрошенной страницы вместе с метаданными.

        Нужен для списков, которые API отдаёт целиком (приложения).
        Страница за пределами списка даёт пустой список.
        """
        pagination = Paginator.paginate(len(items), requested_page, page_size)
        start = (requested_page - 1) * page_size
        return list(items[start:start + page_size]), pagination
