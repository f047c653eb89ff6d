"""
Tile naming - output file names and painting identities
"""

from typing import List


def tile_file_base(name_root: str, row_index: int, tile_index: int) -> str:
    """File base name shared by the .bmp and .paint artifacts of a tile"""
    return f"{name_root}_{row_index}_{tile_index}"


class IdentityAssigner:
    """
    Run-scoped generator of painting names

    Names are "<namespace>_<base_id + counter>". The counter starts at 0
    and advances by one per tile, in planning order.
    """

    def __init__(self, namespace: str, base_id: int):
        self.namespace = namespace
        self.base_id = base_id
        self._counter = 0

    @classmethod
    def for_context(cls, context) -> "IdentityAssigner":
        """Create an assigner for a RunContext"""
        return cls(context.namespace, context.base_id)

    @property
    def counter(self) -> int:
        return self._counter

    def identity_at(self, offset: int) -> str:
        return f"{self.namespace}_{self.base_id + offset}"

    def next_identity(self) -> str:
        """Get the identity for the current counter and advance it"""
        identity = self.identity_at(self._counter)
        self._counter += 1
        return identity

    def assign(self, count: int) -> List[str]:
        """Reserve the next `count` identities in order"""
        return [self.next_identity() for _ in range(count)]
