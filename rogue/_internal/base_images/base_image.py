import typing as t
from abc import ABC, abstractmethod

import attrs

T = t.TypeVar("T", bound="BaseImage")


@attrs.frozen
class BaseImage(ABC):
    @abstractmethod
    def get_repository(self) -> str:
        pass

    @abstractmethod
    def get_tag(self) -> str:
        pass

    @property
    def name(self) -> str:
        return self.get_repository() + ":" + self.get_tag()


@attrs.frozen
class BaseImageCollection(t.Generic[T], ABC):
    images: t.List[T]

    @classmethod
    @abstractmethod
    def default(cls) -> "BaseImageCollection":
        pass
