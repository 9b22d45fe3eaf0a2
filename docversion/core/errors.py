"""Таксономия ошибок сервиса.

Каждая ошибка несет вид (``kind``) и человекочитаемое сообщение; HTTP-слой
превращает их в структурированный ответ ``{"kind": ..., "message": ...}``.
"""


class DocVersionError(Exception):
    """Базовая ошибка сервиса"""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(DocVersionError):
    """Некорректное или отсутствующее поле, неверный тип"""

    kind = "validation"
    status_code = 400


class NotFoundError(DocVersionError):
    """Документ или версия не найдены (или принадлежат другому родителю)"""

    kind = "not_found"
    status_code = 404


class AccessDeniedError(DocVersionError):
    """Пользователь не владеет ресурсом"""

    kind = "access_denied"
    status_code = 403


class AuthenticationError(DocVersionError):
    """Отсутствует или недействителен токен доступа"""

    kind = "unauthenticated"
    status_code = 401


class InternalError(DocVersionError):
    """Сбой хранилища или непредвиденная ошибка"""

    kind = "internal"
    status_code = 500
