"""Processing order for month-wide recalculation"""

import heapq
from typing import Dict, List, Optional, Protocol, Sequence, TypeVar


class Linked(Protocol):
    id: int
    parent_payment_id: Optional[int]


T = TypeVar("T", bound=Linked)


def recalculation_order(payments: Sequence[T]) -> List[T]:
    """
    Order payments so every rebill is processed after its parent.

    `payments` must already be in chronological order (payment_date, then
    insertion order). Among payments with no pending dependency that order
    is kept; a rebill dated before its in-scope parent is held back until
    the parent has been emitted. Parents outside the batch impose nothing.
    """
    position: Dict[int, int] = {p.id: i for i, p in enumerate(payments)}
    waiting_on: Dict[int, List[int]] = {}
    ready: List[int] = []

    for i, payment in enumerate(payments):
        parent_id = payment.parent_payment_id
        if parent_id is not None and parent_id in position and parent_id != payment.id:
            waiting_on.setdefault(parent_id, []).append(i)
        else:
            heapq.heappush(ready, i)

    ordered: List[T] = []
    while ready:
        i = heapq.heappop(ready)
        payment = payments[i]
        ordered.append(payment)
        for child in waiting_on.pop(payment.id, []):
            heapq.heappush(ready, child)

    # Anything left is stuck in a parent cycle; keep date order for those
    emitted = {p.id for p in ordered}
    ordered.extend(p for p in payments if p.id not in emitted)
    return ordered
