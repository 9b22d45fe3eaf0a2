import asyncio
import uuid
import weakref


class DocumentLocks:
    """Реестр эксклюзивных секций по документу.

    Последовательность "прочитать содержимое -> посчитать дифф -> записать"
    для одного документа должна выполняться строго по очереди, иначе
    параллельные запросы теряют базу сравнения друг друга. Замки хранятся
    по слабым ссылкам и исчезают, когда их никто не держит.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_document(self, document_id: uuid.UUID) -> asyncio.Lock:
        """Получение замка для документа"""
        lock = self._locks.get(document_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[document_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


document_locks = DocumentLocks()
