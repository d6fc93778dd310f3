from enum import Enum

from sqlalchemy import text

from borrowing_service.extensions import db


class LoanStatus(str, Enum):
    BORROWED = "Borrowed"
    RETURNED = "Returned"
    OVERDUE = "Overdue"


_ACTIVE_SQL = text("status IN ('Borrowed', 'Overdue')")


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.Integer, primary_key=True)

    # user/book baska servislerde; FK yok, dogrulama sadece uzak cagri ile
    user_id = db.Column(db.Integer, nullable=False, index=True)
    book_id = db.Column(db.Integer, nullable=False, index=True)

    borrowed_at = db.Column(db.DateTime, nullable=False)
    due_at = db.Column(db.DateTime, nullable=False)
    returned_at = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=LoanStatus.BORROWED.value)  # Borrowed/Returned/Overdue

    __table_args__ = (
        # kullanici basina tek aktif odunc; (user, book) tekilligi de buradan gelir.
        # MAX_ACTIVE_LOANS artarsa (user_id, book_id) icin ayri bir index gerekir.
        db.Index(
            "uq_loans_one_active_per_user",
            "user_id",
            unique=True,
            sqlite_where=_ACTIVE_SQL,
            postgresql_where=_ACTIVE_SQL,
            mssql_where=_ACTIVE_SQL,
        ),
    )

    def __repr__(self):
        return f"<Loan id={self.id} user={self.user_id} book={self.book_id} status={self.status}>"
