from typing import Awaitable, Callable, List, Sequence

ChangeListener = Callable[[Sequence[str]], Awaitable[None]]


class ChangeNotifier:
    """Fan-out of "these collections were just written" to interested parties."""

    def __init__(self):
        self._listeners: List[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def notify(self, collections: Sequence[str]) -> None:
        for listener in list(self._listeners):
            await listener(tuple(collections))
