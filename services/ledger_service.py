# services/ledger_service.py
"""
Wallet ledger service - append-only balance records.

When a sale is confirmed:
1. The payee's wallet is fetched or lazily created
2. One Transaction row is appended referencing the purchase
3. The wallet balance is incremented in SQL by the same amount

Both writes share the caller's transaction, so a balance never moves without
its ledger entry. Ledger rows are never updated or deleted.

Verification: the sum of a wallet's transactions must equal its balance.
"""
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import logger
from models import Purchase, Wallet, Transaction, TransactionType, TransactionStatus
from .errors import LedgerError
from .repositories import WalletRepository, TransactionRepository


def get_or_create_wallet(db: Session, owner_id: str) -> Wallet:
     """
     Return the wallet for owner_id, creating it with a zero balance if missing.

     Creation runs in a SAVEPOINT so losing a concurrent insert race only
     rolls back the insert, not the surrounding transaction.
     """
     wallets = WalletRepository(db)
     wallet = wallets.get_by_owner(owner_id)
     if wallet is not None:
          return wallet

     try:
          with db.begin_nested():
               wallet = wallets.add(Wallet(owner_id=owner_id, balance=0))
     except IntegrityError:
          wallet = wallets.get_by_owner(owner_id)
          if wallet is None:
               raise
     else:
          logger.info(f"Created wallet {wallet.id} for owner {owner_id}")
     return wallet


def credit_wallet(
     db: Session,
     wallet: Wallet,
     amount: int,
     type_: TransactionType,
     purchase: Purchase,
     details: dict,
     keep_zero: bool = False,
) -> Optional[Transaction]:
     """
     Append a ledger entry and apply it to the wallet balance.

     A zero amount records nothing and returns None, unless keep_zero is set.

     Raises:
          LedgerError: negative amount or the wallet row vanished
          IntegrityError: this purchase already credited this wallet with this type
     """
     if amount < 0:
          raise LedgerError(f"Refusing to credit negative amount {amount} to wallet {wallet.id}")
     if amount == 0 and not keep_zero:
          return None

     entry = TransactionRepository(db).append(
          Transaction(
               wallet_id=wallet.id,
               reference_id=purchase.id,
               amount=amount,
               type=type_,
               status=TransactionStatus.COMPLETED,
               details=details,
          )
     )
     if WalletRepository(db).increment_balance(wallet.id, amount) != 1:
          raise LedgerError(f"Wallet {wallet.id} not found while crediting {amount}")
     return entry


def reconcile_wallet(db: Session, wallet: Wallet) -> Tuple[bool, int]:
     """
     Recompute a wallet balance from its ledger.

     Returns:
          (consistent: bool, ledger_total: int)
     """
     ledger_total = TransactionRepository(db).sum_for_wallet(wallet.id)
     consistent = ledger_total == wallet.balance
     if not consistent:
          logger.error(
               f"Ledger invariant violated for wallet {wallet.id}: "
               f"balance={wallet.balance}, ledger_total={ledger_total}"
          )
     return consistent, ledger_total
