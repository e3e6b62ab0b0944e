"""
Collection shapes.

A shape is the closed set of capabilities a container exposes: whether it is
keyed, randomly addressable, sized, or only enumerable once. Members are listed
in classification priority order, the first match wins.
"""
from enum import Enum


class ShapeFamily(Enum):
    ASSOCIATIVE = "associative"
    INDEXED = "indexed"
    SIZED = "sized"
    FORWARD_ONLY = "forward_only"


class CollectionShape(Enum):
    TYPED_ASSOCIATIVE = (ShapeFamily.ASSOCIATIVE, True)
    UNTYPED_ASSOCIATIVE = (ShapeFamily.ASSOCIATIVE, False)
    TYPED_INDEXED = (ShapeFamily.INDEXED, True)
    UNTYPED_INDEXED = (ShapeFamily.INDEXED, False)
    TYPED_SIZED = (ShapeFamily.SIZED, True)
    UNTYPED_SIZED = (ShapeFamily.SIZED, False)
    TYPED_FORWARD_ONLY = (ShapeFamily.FORWARD_ONLY, True)
    UNTYPED_FORWARD_ONLY = (ShapeFamily.FORWARD_ONLY, False)

    @property
    def family(self) -> ShapeFamily:
        return self.value[0]

    @property
    def is_typed(self) -> bool:
        return self.value[1]

    @property
    def is_associative(self) -> bool:
        return self.family is ShapeFamily.ASSOCIATIVE

    @property
    def is_indexed(self) -> bool:
        return self.family is ShapeFamily.INDEXED

    @property
    def is_sized(self) -> bool:
        return self.family is ShapeFamily.SIZED

    @property
    def is_forward_only(self) -> bool:
        return self.family is ShapeFamily.FORWARD_ONLY

    @classmethod
    def of(cls, family: ShapeFamily, typed: bool) -> "CollectionShape":
        """Shape member of a family, typed or not."""
        return cls((family, typed))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.{self.name}"
