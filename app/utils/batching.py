from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size < 1:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
