from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from borrowing_service.models.loan import Loan, LoanStatus
from borrowing_service.repositories.loan_repo import LoanRepo
from borrowing_service.services import policy
from borrowing_service.services.errors import (
    ActiveLoanLimitReached,
    AlreadyReturned,
    AuthenticationRequired,
    BookNotFound,
    BookUnavailable,
    InventoryUnavailable,
    InventoryUpdateFailed,
    LoanNotFound,
    LoanPersistFailed,
    NotAuthorized,
)
from borrowing_service.services.loan_composer import LoanComposer


class LoanService:
    """
    Borrow/return orchestration across the Book service and the local loans table.

    Sira onemli: uzak stok dusumu her zaman yerel kayittan once yapilir.
    Kaydi olmayan bir dusum elle duzeltilebilir; dusumu olmayan bir kayit ise
    sessizce fazla kopya dagitir.
    """

    def __init__(
        self,
        book_client,
        auth_client,
        loan_days: int = policy.DEFAULT_LOAN_DAYS,
        compensate_failed_borrow: bool = True,
    ):
        self.book_client = book_client
        self.auth_client = auth_client
        self.loan_days = loan_days
        self.compensate_failed_borrow = compensate_failed_borrow
        self.composer = LoanComposer(book_client, auth_client)

    @staticmethod
    def _require_requester(requester_id: Optional[int]) -> int:
        if requester_id is None:
            raise AuthenticationRequired()
        return requester_id

    # -----------------------------
    # Borrow
    # -----------------------------
    def borrow(self, requester_id: Optional[int], book_id: int) -> Loan:
        user_id = self._require_requester(requester_id)
        log = current_app.logger
        log.debug(f"[borrow] user={user_id} book={book_id} attempting to borrow")

        # 1) ayni kitap zaten odunc alinmis mi
        policy.ensure_not_already_borrowed(LoanRepo.find_by_user_book_and_status(user_id, book_id))
        # 2) kullanici basina tek aktif odunc
        policy.ensure_within_loan_limit(LoanRepo.list_by_user_and_status(user_id))

        # 3) uzak stok sorgusu
        copies = self.book_client.get_available_copies(book_id)
        if copies.is_not_found:
            log.error(f"[borrow] Book {book_id} not found in book service during availability check")
            raise BookNotFound()
        if copies.is_failed:
            log.error(f"[borrow] Availability check failed for book {book_id}: {copies.error}")
            raise InventoryUnavailable()

        # 4) stok var mi
        policy.ensure_copies_available(copies.value)

        # 5) uzak stok dus (fiili rezervasyon)
        decrement = self.book_client.decrement_copies(book_id)
        if decrement.is_not_found:
            log.error(f"[borrow] Book {book_id} disappeared before decrement; nothing borrowed")
            raise BookNotFound("Book not found or already deleted from the library. Cannot borrow.")
        if decrement.is_failed:
            log.error(f"[borrow] Decrement failed for book {book_id}: {decrement.error}")
            raise InventoryUpdateFailed()
        if decrement.value is False:
            log.warning(f"[borrow] Book {book_id} ran out of copies before decrement")
            raise BookUnavailable()

        # 6) ancak simdi yerel kayit
        now = policy.utcnow()
        loan = Loan(
            user_id=user_id,
            book_id=book_id,
            borrowed_at=now,
            due_at=policy.compute_due_date(now, self.loan_days),
            status=LoanStatus.BORROWED.value,
        )
        try:
            LoanRepo.create(loan)
        except IntegrityError as e:
            # ayni kullanicinin eszamanli baska bir borrow'u once commit etti
            log.warning(f"[borrow] Concurrent active loan for user {user_id}: {e}")
            self._compensate_decrement(book_id)
            raise ActiveLoanLimitReached() from e
        except SQLAlchemyError as e:
            log.exception(f"[borrow] Loan persist failed after decrement (user={user_id} book={book_id}): {e}")
            self._compensate_decrement(book_id)
            raise LoanPersistFailed() from e

        log.info(f"[borrow] Book {book_id} borrowed by user {user_id}. Loan ID: {loan.id}")
        return loan

    def _compensate_decrement(self, book_id: int) -> None:
        log = current_app.logger
        if not self.compensate_failed_borrow:
            log.error(f"[borrow] Compensation disabled; book {book_id} needs manual reconciliation (+1 copy)")
            return
        result = self.book_client.increment_copies(book_id)
        if result.is_ok:
            log.info(f"[borrow] Compensating increment applied for book {book_id}")
        else:
            log.error(
                f"[borrow] Compensating increment for book {book_id} did not apply "
                f"({result.outcome.value}: {result.error}); needs manual reconciliation"
            )

    # -----------------------------
    # Return
    # -----------------------------
    def return_loan(self, loan_id: int, requester_id: Optional[int]) -> Loan:
        user_id = self._require_requester(requester_id)
        log = current_app.logger
        log.debug(f"[return] user={user_id} attempting to return loan {loan_id}")

        loan = LoanRepo.get(loan_id)
        if not loan:
            log.error(f"[return] Loan not found: {loan_id}")
            raise LoanNotFound(f"Borrow record not found with ID: {loan_id}")

        if loan.user_id != user_id:
            log.warning(f"[return] User {user_id} tried to return loan {loan_id} of another user")
            raise NotAuthorized()

        if not policy.is_active(loan.status) or loan.returned_at is not None:
            log.warning(f"[return] Loan {loan_id} is already {loan.status} (returned_at={loan.returned_at})")
            raise AlreadyReturned()

        # 4) once satiri sahiplen, sonra uzak artis; ikinci bir iade burada durur
        returned_at = max(policy.utcnow(), loan.borrowed_at)
        try:
            claimed = LoanRepo.claim_for_return(loan.id, returned_at)
        except SQLAlchemyError as e:
            log.exception(f"[return] Loan {loan_id} could not be claimed for return: {e}")
            raise LoanPersistFailed("Could not save the return. Please try again later.") from e
        if not claimed:
            log.warning(f"[return] Loan {loan_id} was returned by a concurrent request")
            raise AlreadyReturned()

        increment = self.book_client.increment_copies(loan.book_id)
        if increment.is_not_found:
            # kitap silinmis: stok artisi atlanir, odunc yine de kapanir
            log.warning(f"[return] Book {loan.book_id} no longer exists; closing loan {loan_id} anyway")
        elif increment.is_failed:
            log.error(f"[return] Increment failed for book {loan.book_id}: {increment.error}")
            self._release_claim(loan_id)
            raise InventoryUpdateFailed(
                "Failed to communicate with Book Service to update availability. Please try again later."
            )

        # 5) kapat
        loan.status = LoanStatus.RETURNED.value
        try:
            LoanRepo.save(loan)
        except SQLAlchemyError as e:
            log.exception(
                f"[return] Loan {loan_id} could not be saved as returned after increment of book {loan.book_id}; "
                f"needs manual reconciliation: {e}"
            )
            raise LoanPersistFailed("Could not save the return. Please try again later.") from e

        log.info(f"[return] Book {loan.book_id} returned by user {user_id}. Loan ID: {loan.id}")
        return loan

    def _release_claim(self, loan_id: int) -> None:
        try:
            LoanRepo.release_return_claim(loan_id)
        except SQLAlchemyError as e:
            current_app.logger.exception(f"[return] Claim on loan {loan_id} could not be released: {e}")

    # -----------------------------
    # Listing (enriched)
    # -----------------------------
    def list_own(self, requester_id: Optional[int]) -> list:
        user_id = self._require_requester(requester_id)
        current_app.logger.debug(f"[list] Fetching loans for user {user_id}")
        return self.composer.compose_many(LoanRepo.list_by_user(user_id))

    def list_all(self) -> list:
        current_app.logger.debug("[list] Fetching all loans for admin view")
        return self.composer.compose_many(LoanRepo.list_all())

    def view(self, loan: Loan) -> dict:
        return self.composer.compose(loan)
