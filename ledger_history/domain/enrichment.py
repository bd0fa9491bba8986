"""
Token symbol enrichment.

Replaces numeric token ids inside history payloads with token symbols.
Fungible ids (below the NFT threshold) become their symbol, or
"UNKNOWN" when the token table has no entry; NFT ids stay numeric.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from ledger_history.config.constants import (
    MIN_NFT_TOKEN_ID,
    PRIORITY_OP_KEY,
    PRIORITY_OP_KINDS,
    TX_KINDS,
    UNKNOWN_TOKEN_SYMBOL,
)
from ledger_history.domain.ordering import HistoryEntry
from ledger_history.domain.payload import payload_kind


class TokenSymbolEnricher:
    """
    Rewrites the "token" field of payloads in place.

    Field location depends on the payload kind: Deposit and FullExit keep
    it inside the nested "priority_op" object, every other known kind at
    the top level. Payloads with a missing or unknown kind are left as
    they are and reported to the caller.
    """

    def __init__(
        self,
        symbols: Mapping[int, str],
        min_nft_token_id: int = MIN_NFT_TOKEN_ID,
    ) -> None:
        """
        Initialize enricher.

        Args:
            symbols: Token id to symbol table
            min_nft_token_id: First token id treated as an NFT
        """
        self.symbols = symbols
        self.min_nft_token_id = min_nft_token_id

    def symbol_for(self, token_id: int) -> str | int:
        """Return the display value for a token id."""
        if token_id >= self.min_nft_token_id:
            return token_id
        return self.symbols.get(token_id, UNKNOWN_TOKEN_SYMBOL)

    def _token_holder(self, payload: Any) -> dict[str, Any] | None:
        kind = payload_kind(payload)
        if kind is None:
            logger.warning(f"[Enricher] Payload kind tag not found: {payload!r}")
            return None

        if kind in PRIORITY_OP_KINDS:
            holder = payload.get(PRIORITY_OP_KEY)
            if not isinstance(holder, dict):
                logger.warning(
                    f"[Enricher] {kind} payload has no {PRIORITY_OP_KEY} object"
                )
                return None
            return holder

        if kind in TX_KINDS:
            return payload

        logger.warning(f"[Enricher] Unknown payload kind: {kind}")
        return None

    def enrich(self, payload: Any) -> bool:
        """
        Enrich one payload in place.

        Args:
            payload: Transaction or priority operation JSON

        Returns:
            False if the payload was left untouched because it is
            malformed, True otherwise (also when it carries no token)
        """
        holder = self._token_holder(payload)
        if holder is None:
            return False

        value = holder.get("token")
        # Already rendered values (symbols) and bool flags are not ids
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            holder["token"] = self.symbol_for(value)
        return True

    def enrich_entries(self, entries: Iterable[HistoryEntry]) -> int:
        """
        Enrich every entry of a page.

        A malformed entry is flagged (entry.enriched = False) and skipped;
        it never stops enrichment of the remaining entries.

        Returns:
            Number of flagged entries
        """
        flagged = 0
        for entry in entries:
            entry.enriched = self.enrich(entry.tx)
            if not entry.enriched:
                flagged += 1
                logger.warning(
                    f"[Enricher] History item {entry.tx_hash} left unmodified"
                )
        return flagged
