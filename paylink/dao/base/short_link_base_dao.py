"""Abstract base class for ShortLink data access objects (DAOs).

This class establishes a consistent contract for all ShortLink DAO implementations,
regardless of the underlying storage mechanism.

Responsibilities:
    - Provide an interface for inserting and retrieving ShortLinkModel objects.
    - Guarantee store-if-absent semantics so a live token is never overwritten.
    - Standardize error handling across data store implementations.

NOTE:
    Mappings expire through the data store's own TTL. The DAO does not
    provide an interface to manually delete entries.
"""

from abc import ABC, abstractmethod

from paylink.models import ShortLinkModel


class ShortLinkBaseDAO(ABC):
    """Interface for ShortLink data access objects (DAOs).

    Methods:
        insert(short_link: ShortLinkModel, ttl: int, **kwargs) -> ShortLinkBaseDAO:
            Store a token -> target mapping only if the token is not live.
            Raises ShortLinkAlreadyExistsError if the token already exists.
            Raises DataStoreError on connection or write failure.

        get(token: str, **kwargs) -> ShortLinkModel:
            Retrieve a ShortLinkModel by token.
            Raises ShortLinkNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or read failure.
    """

    @abstractmethod
    def insert(self, short_link: ShortLinkModel, ttl: int, **kwargs) -> 'ShortLinkBaseDAO':
        """Insert a new ShortLinkModel into the data store.

        Args:
            short_link (ShortLinkModel):
                The mapping to store.

            ttl (int):
                Lifetime of the mapping in seconds.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortLinkBaseDAO: self (for method chaining)

        Raises:
            ShortLinkAlreadyExistsError:
                If a live mapping with the same token already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, token: str, **kwargs) -> ShortLinkModel:
        """Retrieve a ShortLinkModel from the data store by its token.

        Raises:
            ShortLinkNotFoundError:
                If no live mapping with the given token exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass
