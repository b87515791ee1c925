class BoardError(Exception):
    """Базовая ошибка приложения."""

    status_code = 500


class NotFoundError(BoardError, LookupError):
    """Объявление, категория, пользователь или токен не найдены."""

    status_code = 404

    def __init__(self, entity: str, identifier) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class ValidationError(BoardError, ValueError):
    """Входные данные не проходят проверки (длина, поля)."""

    status_code = 400


class RateLimitError(BoardError):
    """Превышен лимит объявлений с одного IP."""

    status_code = 429


class DuplicateError(BoardError):
    """Нарушена уникальность (email, имя категории, токен)."""

    status_code = 409


class PermissionDeniedError(BoardError):
    """Неверный токен редактирования."""

    status_code = 403
