import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Parsed:
    """Содержимое, успешно разобранное как JSON"""
    value: Any

    @property
    def is_container(self) -> bool:
        return isinstance(self.value, (dict, list))


@dataclass(frozen=True)
class Opaque:
    """Содержимое, которое не является JSON; сравнивается только целиком"""
    raw: Any


StructuredValue = Union[Parsed, Opaque]


def _reject_constant(name: str):
    # NaN и Infinity не равны сами себе и ломают сравнение снимков
    raise ValueError(f"Unsupported JSON constant: {name}")


class ContentCodec:
    """Разбор строкового снимка документа в дерево JSON.

    Используется только для выбора стратегии диффа: в хранилище всегда
    попадает исходная строка.
    """

    @staticmethod
    def decode(raw: str) -> StructuredValue:
        """Разбор снимка; при любой ошибке возвращается Opaque, исключений нет"""
        if not isinstance(raw, (str, bytes, bytearray)):
            return Opaque(raw)
        try:
            return Parsed(json.loads(raw, parse_constant=_reject_constant))
        except (ValueError, RecursionError):
            return Opaque(raw)

    @staticmethod
    def canonical(value: Any) -> str:
        """Каноническая сериализация JSON-значения (ключи отсортированы)"""
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
