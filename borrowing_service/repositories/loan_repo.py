from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from borrowing_service.extensions import db
from borrowing_service.models.loan import Loan, LoanStatus
from borrowing_service.services.policy import ACTIVE_STATUSES


class LoanRepo:
    @staticmethod
    @contextmanager
    def atomic():
        """Tek commit noktasi; hata olursa yarim yazilmis satir kalmasin."""
        try:
            yield db.session
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    @staticmethod
    def get(loan_id: int):
        return db.session.get(Loan, loan_id)

    @staticmethod
    def list_by_user(user_id: int):
        return Loan.query.filter_by(user_id=user_id).order_by(Loan.id.desc()).all()

    @staticmethod
    def list_all():
        return Loan.query.order_by(Loan.id.desc()).all()

    @staticmethod
    def list_by_user_and_status(user_id: int, statuses=ACTIVE_STATUSES):
        return Loan.query.filter(
            Loan.user_id == user_id,
            Loan.status.in_(statuses)
        ).all()

    @staticmethod
    def find_by_user_book_and_status(user_id: int, book_id: int, statuses=ACTIVE_STATUSES):
        return Loan.query.filter(
            Loan.user_id == user_id,
            Loan.book_id == book_id,
            Loan.status.in_(statuses)
        ).first()

    @staticmethod
    def create(loan: Loan):
        with LoanRepo.atomic() as session:
            session.add(loan)
        return loan

    @staticmethod
    def save(loan: Loan):
        with LoanRepo.atomic() as session:
            session.add(loan)
        return loan

    @staticmethod
    def claim_for_return(loan_id: int, returned_at: datetime) -> bool:
        """
        returned_at'i yalnizca hala aktif ve sahiplenilmemis satira yazar.
        Status aktif kalir; kullanicinin tek odunc hakki iade bitene kadar dolu.
        Returns: True if this caller won the claim.
        """
        with LoanRepo.atomic() as session:
            result = session.execute(
                update(Loan)
                .where(
                    Loan.id == loan_id,
                    Loan.status.in_(ACTIVE_STATUSES),
                    Loan.returned_at.is_(None)
                )
                .values(returned_at=returned_at)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount == 1

    @staticmethod
    def release_return_claim(loan_id: int):
        with LoanRepo.atomic() as session:
            session.execute(
                update(Loan)
                .where(Loan.id == loan_id, Loan.status.in_(ACTIVE_STATUSES))
                .values(returned_at=None)
                .execution_options(synchronize_session=False)
            )

    @staticmethod
    def find_overdue(now: datetime):
        return Loan.query.filter(
            Loan.status == LoanStatus.BORROWED.value,
            Loan.returned_at.is_(None),
            Loan.due_at < now
        ).all()

    @staticmethod
    def mark_overdue(loan_ids, now: datetime) -> list:
        """
        Borrowed -> Overdue, satir satir kosullu; okuma ile yazma arasinda
        iade edilen ya da iadesi baslamis satirlar atlanir.
        Returns: ids actually moved to Overdue.
        """
        changed = []
        with LoanRepo.atomic() as session:
            for loan_id in loan_ids:
                result = session.execute(
                    update(Loan)
                    .where(
                        Loan.id == loan_id,
                        Loan.status == LoanStatus.BORROWED.value,
                        Loan.returned_at.is_(None),
                        Loan.due_at < now
                    )
                    .values(status=LoanStatus.OVERDUE.value)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:
                    changed.append(loan_id)
        return changed
