from abc import ABC, abstractmethod

from bulkadd.parsing.models import ParsedItem


class ItemStep(ABC):
    """One per-item stage. Returns a new record and never mutates its input."""

    @abstractmethod
    def run(self, item: ParsedItem) -> ParsedItem:
        raise NotImplementedError

    def close(self) -> None:
        """Release clients owned by this step."""
