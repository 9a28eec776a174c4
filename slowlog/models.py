"""Write-path data handed to the slow log."""

from dataclasses import dataclass
from enum import Enum


class OperationKind(Enum):
    INDEX = "index"
    CREATE = "create"


@dataclass(frozen=True)
class ShardId:
    index: str
    shard: int

    def __str__(self) -> str:
        return f"[{self.index}][{self.shard}]"


@dataclass(frozen=True)
class Operation:
    """A completed index or create operation, as seen by the slow log."""

    kind: OperationKind
    doc_type: str
    doc_id: str
    routing: str | None = None
    source: bytes | None = None
