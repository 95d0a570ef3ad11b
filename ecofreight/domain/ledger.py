"""Simulated blockchain ledger.

Nothing here touches a real chain: transaction hashes are random hex, block
numbers are random, and "verification" only checks the hash shape and whether
this process has seen the hash before. The ledger lives for the lifetime of the
process, like the in-memory arrays of a warm serverless function.
"""

import json
import random
import re
import secrets
import threading
from collections import deque
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

MOCK_WALLET_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
MOCK_CONTRACT_ADDRESS = "0x8Ba1f109551bD432803012645Ac136ddd64DBA72"
MOCK_GAS_USED = 42688

BLOCK_RANGE = (15_000_000, 16_000_000)
MAX_TRANSACTIONS = 1000
CREDIT_MIN_SCORE = 50

_HASH_RE = re.compile(r"^0x[0-9a-f]{64}$")


def generate_transaction_hash() -> str:
    """66 characters: ``0x`` followed by 64 lowercase hex digits."""
    return "0x" + secrets.token_hex(32)


def is_transaction_hash(value: Any) -> bool:
    return isinstance(value, str) and bool(_HASH_RE.match(value))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MockTransaction:
    hash: str
    block_number: int
    data: str
    from_address: str = MOCK_WALLET_ADDRESS
    to_address: str = MOCK_CONTRACT_ADDRESS
    status: str = "confirmed"
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CarbonCreditError(ValueError):
    pass


class MockLedger:
    def __init__(self, rng: Optional[random.Random] = None, max_transactions: int = MAX_TRANSACTIONS):
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._transactions: Deque[MockTransaction] = deque(maxlen=max_transactions)
        self._by_hash: Dict[str, MockTransaction] = {}

    def _record(self, payload: Dict[str, Any], status: str = "confirmed") -> MockTransaction:
        tx = MockTransaction(
            hash=generate_transaction_hash(),
            block_number=self._rng.randrange(*BLOCK_RANGE),
            data=json.dumps(payload, default=str, sort_keys=True),
            status=status,
        )
        with self._lock:
            if len(self._transactions) == self._transactions.maxlen:
                evicted = self._transactions[0]
                self._by_hash.pop(evicted.hash, None)
            self._transactions.append(tx)
            self._by_hash[tx.hash] = tx
        return tx

    def register(self, shipment_data: Dict[str, Any]) -> Dict[str, Any]:
        tx = self._record({"operation": "register", **shipment_data})
        return {
            "success": True,
            "transaction_hash": tx.hash,
            "block_number": tx.block_number,
            "blockchain_record": {
                "shipment_id": shipment_data.get("id") or shipment_data.get("shipment_id"),
                "timestamp": tx.timestamp,
                "carbon_footprint": shipment_data.get("carbon_footprint"),
                "transport_type": shipment_data.get("transport_type"),
                "verified": True,
            },
        }

    def update(self, shipment_id: str, status: Optional[str] = None, metadata: Any = None) -> Dict[str, Any]:
        tx = self._record({"operation": "update", "shipment_id": shipment_id, "status": status, "metadata": metadata})
        return {
            "success": True,
            "transaction_hash": tx.hash,
            "block_number": tx.block_number,
            "blockchain_record": {
                "shipment_id": shipment_id,
                "timestamp": tx.timestamp,
                "status": status or "updated",
                "metadata": metadata,
                "verified": True,
            },
        }

    def verify(self, tx_hash: str) -> Dict[str, Any]:
        """Report a hash as verified when it is well formed; ``known`` says whether this process issued it."""
        with self._lock:
            tx = self._by_hash.get(tx_hash)
        return {
            "verified": is_transaction_hash(tx_hash),
            "known": tx is not None,
            "hash": tx_hash,
            "block_number": tx.block_number if tx else None,
            "timestamp": tx.timestamp if tx else _now_iso(),
            "from": tx.from_address if tx else MOCK_WALLET_ADDRESS,
            "to": tx.to_address if tx else MOCK_CONTRACT_ADDRESS,
            "gas_used": MOCK_GAS_USED,
            "status": "success" if is_transaction_hash(tx_hash) else "invalid",
        }

    def issue_carbon_credits(self, shipment_id: str, sustainability_score: int) -> Dict[str, Any]:
        if sustainability_score < CREDIT_MIN_SCORE:
            raise CarbonCreditError(
                f"Sustainability score {sustainability_score} is below the minimum of {CREDIT_MIN_SCORE}"
            )
        tokens = int(sustainability_score) // 10
        tx = self._record({"operation": "carbon-credits", "shipment_id": shipment_id, "tokens": tokens})
        return {"success": True, "tokens": tokens, "transaction_hash": tx.hash, "block_number": tx.block_number}

    def count(self) -> int:
        return len(self._transactions)

    def recent(self, limit: int = 5) -> List[MockTransaction]:
        with self._lock:
            items = list(self._transactions)
        return list(reversed(items))[:limit]

    def clear(self) -> None:
        with self._lock:
            self._transactions.clear()
            self._by_hash.clear()


ledger = MockLedger()


def get_ledger() -> MockLedger:
    return ledger
