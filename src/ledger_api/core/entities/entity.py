from typing import Generic, TypeVar

T = TypeVar("T")


class Entity(Generic[T]):
    """A stored value paired with the identifier storage gave it."""

    def __init__(self, props: T, id: int) -> None:
        self.__id = id
        self.__props = props

    @property
    def id(self) -> int:
        return self.__id

    @property
    def props(self) -> T:
        return self.__props

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.__id == other.id and self.__props == other.props

    def __hash__(self) -> int:
        return hash((self.__id, self.__props))

    def __repr__(self) -> str:
        return f"Entity(props={self.__props!r}, id={self.__id})"
