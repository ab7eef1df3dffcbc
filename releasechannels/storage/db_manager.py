from abc import ABC, abstractmethod
from typing import List

from releasechannels.domain.models import Release, ReleaseQuery


class ReleaseStore(ABC):
    """
    Abstract base class for release storage.
    """

    @abstractmethod
    def write(self, release: Release) -> None:
        """
        Register a release. Raises ValidationError if a required field is empty.
        """
        pass

    @abstractmethod
    def query(self, query: ReleaseQuery) -> List[Release]:
        """
        Return the releases matching a partial-key filter, in write order.
        An empty list means nothing matched.
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Number of distinct releases in the store."""
        pass
