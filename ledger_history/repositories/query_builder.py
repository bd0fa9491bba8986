"""
Composable history queries.

Builds the statements behind account history reads from optional filters
(token, second address, cursor, direction) with SQLAlchemy expressions,
so every combination yields the same query shape: candidate hashes from
the filter index, a half-open order-key range, a direction-specific
ORDER BY and a LIMIT.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import (
    ColumnElement,
    Select,
    and_,
    func,
    intersect,
    literal,
    or_,
    select,
    tuple_,
    union_all,
)

from ledger_history.domain.ordering import (
    OrderKey,
    Partition,
    SearchDirection,
    SortPosition,
    partition_rank,
)
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.models.executed_transaction import ExecutedTransaction
from ledger_history.models.tx_filter import TxFilter


def membership_hashes(address: str, token: int | None = None) -> Select:
    """Hashes indexed for an address, optionally for one token."""
    stmt = select(TxFilter.tx_hash).where(TxFilter.address == address)
    if token is not None:
        stmt = stmt.where(TxFilter.token == token)
    return stmt.distinct()


def candidate_hashes(
    address: str,
    second_address: str | None = None,
    token: int | None = None,
) -> Select:
    """
    Hashes an address history may contain.

    With a second address, only hashes indexed for both addresses
    (set intersection on tx_hash).
    """
    if second_address is None:
        return membership_hashes(address, token)

    common = intersect(
        membership_hashes(address, token),
        membership_hashes(second_address, token),
    ).subquery("common_hashes")
    return select(common.c.tx_hash)


def position_predicate(
    model: type[ExecutedTransaction] | type[ExecutedPriorityOperation],
    partition: Partition,
    cursor: OrderKey | SortPosition,
    direction: SearchDirection,
) -> ColumnElement[bool]:
    """
    Entries strictly before (OLDER) or after (NEWER) the cursor.

    An OrderKey cursor compares (block_number, block_index) only. A
    SortPosition cursor compares the whole merge position as a row value,
    with the partition rank as a constant for this partition.
    """
    if isinstance(cursor, SortPosition):
        position = tuple_(
            model.block_number,
            model.block_index,
            model.created_at,
            literal(partition_rank(partition)),
            model.tx_hash,
        )
        bound = tuple_(*cursor)
        if direction == SearchDirection.OLDER:
            return position < bound
        return position > bound

    block_column = model.block_number
    index_column = model.block_index
    if direction == SearchDirection.OLDER:
        return or_(
            block_column < cursor.block_number,
            and_(
                block_column == cursor.block_number,
                index_column < cursor.block_index,
            ),
        )
    return or_(
        block_column > cursor.block_number,
        and_(
            block_column == cursor.block_number,
            index_column > cursor.block_index,
        ),
    )


_PARTITIONS = {
    ExecutedTransaction: Partition.TRANSACTION,
    ExecutedPriorityOperation: Partition.PRIORITY_OP,
}


def page_ordering(columns: list[Any], direction: SearchDirection) -> list[Any]:
    """ORDER BY clauses for a page direction."""
    if direction == SearchDirection.OLDER:
        return [column.desc() for column in columns]
    return [column.asc() for column in columns]


@dataclass(frozen=True)
class HistoryQuery:
    """
    Filters of one history page.

    Attributes:
        address: Normalized account address
        direction: Page direction
        limit: Maximum entries per partition slice and per page
        cursor: Exclusive start position (order key or full position of a
            hash cursor), None for the history edge
        second_address: Restrict to transactions shared with this address
        token: Restrict to memberships for this token id
    """

    address: str
    direction: SearchDirection = SearchDirection.OLDER
    limit: int = 25
    cursor: OrderKey | SortPosition | None = None
    second_address: str | None = None
    token: int | None = None

    @property
    def includes_priority_ops(self) -> bool:
        """Priority operations have no symmetric two-party view."""
        return self.second_address is None

    def hashes(self) -> Select:
        return candidate_hashes(self.address, self.second_address, self.token)

    def slice_of(
        self,
        model: type[ExecutedTransaction] | type[ExecutedPriorityOperation],
    ) -> Select:
        """Bounded, direction-sorted slice of one partition."""
        stmt = select(model).where(model.tx_hash.in_(self.hashes()))

        if self.cursor is not None:
            stmt = stmt.where(
                position_predicate(
                    model,
                    _PARTITIONS[model],
                    self.cursor,
                    self.direction,
                )
            )

        ordering = page_ordering(
            [model.block_number, model.block_index, model.created_at, model.tx_hash],
            self.direction,
        )
        return stmt.order_by(*ordering).limit(self.limit)


def count_statement(
    address: str,
    second_address: str | None = None,
    token: int | None = None,
) -> Select:
    """Number of distinct hashes in an address history."""
    hashes = candidate_hashes(address, second_address, token).subquery("hashes")
    return select(func.count()).select_from(hashes)


def _positions(model: Any, partition: Partition, rank: int, hashes: Select) -> Select:
    return select(
        model.tx_hash.label("tx_hash"),
        model.block_number.label("block_number"),
        model.block_index.label("block_index"),
        model.created_at.label("created_at"),
        literal(partition.value).label("partition"),
        literal(rank).label("partition_rank"),
    ).where(model.tx_hash.in_(hashes))


def offset_positions_statement(address: str, offset: int, limit: int) -> Select:
    """
    Positions of an offset page over both partitions, newest first.

    The offset counts from the newest entry at query time, so the page
    shifts when new blocks arrive between calls.
    """
    hashes = membership_hashes(address)
    everything = union_all(
        _positions(ExecutedTransaction, Partition.TRANSACTION, 0, hashes),
        _positions(ExecutedPriorityOperation, Partition.PRIORITY_OP, 1, hashes),
    ).subquery("everything")

    return (
        select(everything)
        .order_by(
            everything.c.block_number.desc(),
            everything.c.block_index.desc(),
            everything.c.created_at.desc(),
            everything.c.partition_rank.desc(),
            everything.c.tx_hash.desc(),
        )
        .offset(offset)
        .limit(limit)
    )
