"""Структурный дифф между двумя снимками содержимого документа.

Оба снимка разбираются через ContentCodec. Если хотя бы один из них не JSON
или оба являются скалярами, дифф вырождается в одну запись замены всего
значения. Иначе деревья сравнивает DeepDiff: словари по ключам, элементы
массивов сопоставляются по ключу идентичности, поэтому вставка или
перестановка объектов с ``id`` не выглядит как замена всего массива.

Формат записи::

    {"op": "added" | "removed" | "changed" | "moved" | "replaced",
     "path": ["items", 2, "title"], "old": ..., "new": ..., "from": 0}

Пути записей ``removed`` указывают позицию в старом массиве, остальные
записи указывают позицию в новом. ``moved`` пишется только для элементов,
которые поменяли порядок относительно соседей; сдвиг из-за вставки или
удаления перемещением не считается. Поле ``from`` хранит старый индекс.
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from deepdiff import DeepDiff
from deepdiff.helper import CannotCompare

from docversion.domains.documents.codec import ContentCodec, Opaque

logger = logging.getLogger(__name__)

ADDED = "added"
REMOVED = "removed"
CHANGED = "changed"
MOVED = "moved"
REPLACED = "replaced"

PathSegment = Union[str, int]
ObjectIdentity = Callable[[Any], str]

# порядок записей с одинаковым путем
_OP_ORDER = {REMOVED: 0, ADDED: 1, CHANGED: 2, MOVED: 3, REPLACED: 4}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def default_identity(element: Any) -> str:
    """Ключ идентичности элемента массива: поле ``id``, иначе весь элемент"""
    if isinstance(element, dict) and element.get("id") not in (None, ""):
        return "id:" + ContentCodec.canonical(element["id"])
    return "value:" + ContentCodec.canonical(element)


@dataclass(frozen=True)
class Change:
    op: str
    path: Tuple[PathSegment, ...]
    old: Any = MISSING
    new: Any = MISSING
    moved_from: Any = MISSING

    def to_dict(self) -> dict:
        data = {"op": self.op, "path": list(self.path)}
        if self.old is not MISSING:
            data["old"] = self.old
        if self.new is not MISSING:
            data["new"] = self.new
        if self.moved_from is not MISSING:
            data["from"] = self.moved_from
        return data


@dataclass(frozen=True)
class Diff:
    """Неизменяемый набор изменений; пустой дифф означает отсутствие изменений"""

    changes: Tuple[Change, ...] = ()

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self):
        return iter(self.changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def is_replacement(self) -> bool:
        return len(self.changes) == 1 and self.changes[0].op == REPLACED

    def to_list(self) -> List[dict]:
        """Сериализация для хранения в JSON-колонке"""
        return [change.to_dict() for change in self.changes]


EMPTY_DIFF = Diff()


def _same_scalar(old: Any, new: Any) -> bool:
    # True == 1 и 1 == 1.0 в Python, но в JSON это разные значения
    return type(old) is type(new) and old == new


def _path_sort_key(change: Change):
    segments = tuple((0, item, "") if isinstance(item, int) else (1, 0, str(item)) for item in change.path)
    return segments, _OP_ORDER[change.op]


def _stable_pairs(pairs: List[Tuple[int, int]]) -> Set[Tuple[int, int]]:
    """Наибольшее подмножество пар (старый, новый индекс), сохраняющее взаимный порядок"""
    tail_values: List[int] = []
    tail_indices: List[int] = []
    previous = [-1] * len(pairs)

    for position, (_, new_index) in enumerate(pairs):
        slot = bisect_left(tail_values, new_index)
        if slot > 0:
            previous[position] = tail_indices[slot - 1]
        if slot == len(tail_values):
            tail_values.append(new_index)
            tail_indices.append(position)
        else:
            tail_values[slot] = new_index
            tail_indices[slot] = position

    stable = set()
    position = tail_indices[-1] if tail_indices else -1
    while position != -1:
        stable.add(pairs[position])
        position = previous[position]
    return stable


class _ElementMatcher:
    """Сопоставление элементов массивов для одного вызова diff.

    Ключи считаются один раз на пару массивов. Если в массиве ключи
    повторяются, DeepDiff получает CannotCompare и сравнивает по позициям.
    """

    def __init__(self, identify: ObjectIdentity):
        self.identify = identify
        self._keys: Dict[Tuple[int, int], Optional[Dict[int, str]]] = {}
        self._stable: Dict[Tuple[int, int], Set[Tuple[int, int]]] = {}

    def _keys_for(self, old: list, new: list) -> Optional[Dict[int, str]]:
        cache_key = (id(old), id(new))
        if cache_key not in self._keys:
            old_keys = [self.identify(item) for item in old]
            new_keys = [self.identify(item) for item in new]
            if len(set(old_keys)) != len(old_keys) or len(set(new_keys)) != len(new_keys):
                self._keys[cache_key] = None
            else:
                keys = {id(item): key for item, key in zip(old, old_keys)}
                keys.update((id(item), key) for item, key in zip(new, new_keys))
                self._keys[cache_key] = keys
                self._stable[cache_key] = self._order_preserving(old_keys, new_keys)
        return self._keys[cache_key]

    @staticmethod
    def _order_preserving(old_keys: List[str], new_keys: List[str]) -> Set[Tuple[int, int]]:
        new_positions = {key: index for index, key in enumerate(new_keys)}
        pairs = [(index, new_positions[key]) for index, key in enumerate(old_keys) if key in new_positions]
        return _stable_pairs(pairs)

    def __call__(self, old_item: Any, new_item: Any, level=None) -> bool:
        keys = self._keys_for(level.t1, level.t2)
        if keys is None:
            raise CannotCompare()
        return keys[id(old_item)] == keys[id(new_item)]

    def is_real_move(self, old: list, new: list, old_index: int, new_index: int) -> bool:
        stable = self._stable.get((id(old), id(new)), set())
        return (old_index, new_index) not in stable


class DiffEngine:
    """Вычисление структурного диффа с настраиваемой идентичностью объектов"""

    def __init__(
        self,
        identify: Optional[ObjectIdentity] = None,
        ignored_keys: Iterable[str] = ("$hashKey",),
        codec: Optional[ContentCodec] = None
    ):
        self.identify = identify or default_identity
        self.ignored_keys = frozenset(ignored_keys)
        self.codec = codec or ContentCodec()

    def diff(self, old_raw: str, new_raw: str, identify: Optional[ObjectIdentity] = None) -> Diff:
        """Дифф от old_raw к new_raw. Никогда не бросает исключений"""
        if old_raw == new_raw:
            return EMPTY_DIFF

        old = self.codec.decode(old_raw)
        new = self.codec.decode(new_raw)

        if isinstance(old, Opaque) or isinstance(new, Opaque):
            return self._replacement(old, new)

        if not (old.is_container and new.is_container):
            if _same_scalar(old.value, new.value):
                return EMPTY_DIFF
            return self._replacement(old, new)

        try:
            changes = self._compare(
                self._strip(old.value),
                self._strip(new.value),
                _ElementMatcher(identify or self.identify)
            )
        except Exception:
            logger.warning("Structural diff failed, falling back to whole-value replace", exc_info=True)
            return self._replacement(old, new)

        return Diff(tuple(sorted(changes, key=_path_sort_key)))

    def _replacement(self, old, new) -> Diff:
        old_value = old.raw if isinstance(old, Opaque) else old.value
        new_value = new.raw if isinstance(new, Opaque) else new.value
        return Diff((Change(REPLACED, (), old=old_value, new=new_value),))

    def _strip(self, value: Any) -> Any:
        """Удаление служебных ключей отображения на всех уровнях"""
        if not self.ignored_keys:
            return value
        if isinstance(value, dict):
            return {
                key: self._strip(item)
                for key, item in value.items()
                if key not in self.ignored_keys
            }
        if isinstance(value, list):
            return [self._strip(item) for item in value]
        return value

    def _compare(self, old: Any, new: Any, matcher: _ElementMatcher) -> List[Change]:
        tree = DeepDiff(
            old,
            new,
            view="tree",
            iterable_compare_func=matcher,
            threshold_to_diff_deeper=0,
        )

        changes: List[Change] = []
        for report_type, levels in tree.items():
            for level in levels:
                change = self._to_change(report_type, level, matcher)
                if change is not None:
                    changes.append(change)
        return changes

    @staticmethod
    def _to_change(report_type: str, level, matcher: _ElementMatcher) -> Optional[Change]:
        path = tuple(level.path(output_format="list"))

        if report_type in ("values_changed", "type_changes"):
            return Change(CHANGED, path, old=level.t1, new=level.t2)
        if report_type in ("dictionary_item_added", "iterable_item_added"):
            return Change(ADDED, path, new=level.t2)
        if report_type in ("dictionary_item_removed", "iterable_item_removed"):
            return Change(REMOVED, path, old=level.t1)
        if report_type == "iterable_item_moved":
            old_index = path[-1]
            new_index = level.path(use_t2=True, output_format="list")[-1]
            if not matcher.is_real_move(level.up.t1, level.up.t2, old_index, new_index):
                return None
            return Change(MOVED, path[:-1] + (new_index,), moved_from=old_index)

        raise ValueError(f"Unexpected diff report: {report_type}")
