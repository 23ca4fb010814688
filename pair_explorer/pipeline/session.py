"""
Caller-held state for one explorer session.

The session owns the single "current pair" slot together with the
``loading`` and ``error`` fields a presentation layer renders. Each UI
session creates its own instance; nothing here is process-wide.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..batchers.errors import BatchError
from ..models import ErrorKind, PairFetchResult, PairRecord
from .pair_resolver import PairResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session handed to listeners."""

    pair_address: str
    data: Optional[PairRecord]
    loading: bool
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairAddress": self.pair_address,
            "data": self.data.to_dict() if self.data else None,
            "loading": self.loading,
            "error": self.error,
        }


Listener = Callable[[SessionSnapshot], None]


class PairExplorerSession:
    """
    State container driving pair fetches.

    Overlapping fetches are allowed. Every fetch gets a generation number;
    with ``discard_stale`` enabled a result is only applied if no newer fetch
    has started since, otherwise whichever fetch finishes last wins. A
    record is always replaced as a whole.

    Args:
        resolver: Pipeline used to resolve pairs
        discard_stale: Drop results that were overtaken by a newer fetch
    """

    def __init__(self, resolver: PairResolver, discard_stale: bool = True):
        self.resolver = resolver
        self.discard_stale = discard_stale
        self.data: Optional[PairRecord] = None
        self.error: str = ""
        self._pair_address = ""
        self._in_flight = 0
        self._generation = 0
        self._listeners: List[Listener] = []
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def pair_address(self) -> str:
        return self._pair_address

    @pair_address.setter
    def pair_address(self, value: Optional[str]) -> None:
        self._pair_address = (value or "").strip()
        self._notify()

    @property
    def loading(self) -> bool:
        """True while at least one fetch is in flight."""
        return self._in_flight > 0

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            pair_address=self._pair_address,
            data=self.data,
            loading=self.loading,
            error=self.error,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` for state changes.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def fetch_pair_data(self, address: Optional[str] = None) -> PairFetchResult:
        """
        Fetch ``address`` (or the current ``pair_address``) into the session.

        Input and configuration problems are reported through ``error``
        without touching ``loading``. On a failed fetch the previous record
        stays in ``data``.

        Returns:
            The PairFetchResult of this fetch, whether or not it was applied
        """
        address = self._pair_address if address is None else address

        try:
            self.resolver.validate(address)
        except BatchError as e:
            self.error = str(e)
            self._notify()
            return PairFetchResult.fail(e.kind or ErrorKind.INPUT_VALIDATION, str(e))

        self._generation += 1
        generation = self._generation
        self._in_flight += 1
        try:
            self.error = ""
            self._notify()
            result = await self.resolver.resolve(address)
        finally:
            self._in_flight -= 1

        if self.discard_stale and generation != self._generation:
            self.logger.info(
                f"Discarding result of fetch #{generation} for {address}; "
                f"fetch #{self._generation} is newer"
            )
        elif result.success:
            self.data = result.record
            self.error = ""
        else:
            self.error = result.error or "Error: Unknown error occurred"

        self._notify()
        return result

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(f"Session listener {listener!r} failed: {e}")
