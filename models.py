# models.py

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Any, List


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


EXPENSE_CATEGORIES = [
    "Ăn uống",
    "Di chuyển",
    "Nhà cửa",
    "Mua sắm",
    "Giải trí",
    "Sức khỏe",
    "Giáo dục",
    "Hóa đơn & Tiện ích",
    "Khác",
]

INCOME_CATEGORIES = [
    "Lương",
    "Thưởng",
    "Đầu tư",
    "Bán hàng",
    "Quà tặng",
    "Khác",
]

COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884d8", "#82ca9d", "#ffc658", "#ff7300"]


def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _check_amount(amount) -> float:
    amount = float(amount)
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        raise ValueError(f"amount must be a non-negative number, got {amount!r}")
    return amount


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction as entered by the user, before the store assigns an id."""
    date: date
    amount: float
    category: str
    description: str = ""
    type: TransactionType = TransactionType.EXPENSE

    def __post_init__(self):
        object.__setattr__(self, "date", _parse_date(self.date))
        object.__setattr__(self, "amount", _check_amount(self.amount))
        object.__setattr__(self, "type", TransactionType(self.type))

    def with_id(self, tx_id: str) -> "Transaction":
        return Transaction(
            id=tx_id,
            date=self.date,
            amount=self.amount,
            category=self.category,
            description=self.description,
            type=self.type,
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    amount: float
    category: str
    description: str
    type: TransactionType

    def __post_init__(self):
        object.__setattr__(self, "date", _parse_date(self.date))
        object.__setattr__(self, "amount", _check_amount(self.amount))
        object.__setattr__(self, "type", TransactionType(self.type))

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "type": self.type.value,
        }

    @staticmethod
    def from_dict(d):
        # every field is required in a persisted record
        return Transaction(
            id=str(d["id"]),
            date=_parse_date(d["date"]),
            amount=d["amount"],
            category=str(d["category"]),
            description=str(d["description"]),
            type=d["type"],
        )


# Derived views (recomputed from a snapshot, never persisted)
@dataclass(frozen=True)
class SummaryData:
    total_income: float = 0.0
    total_expense: float = 0.0

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class CategorySlice:
    category: str
    total_amount: float
    color: str


@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    income_total: float = 0.0
    expense_total: float = 0.0

    @property
    def label(self) -> str:
        return f"{self.month}/{self.year}"


def seed_transactions(today: date) -> List[Transaction]:
    """Default data shown on first run, when nothing has been saved yet."""
    yesterday = today - timedelta(days=1)
    return [
        Transaction(id="1", date=today, amount=15000000, category="Lương",
                    description="Lương tháng này", type=TransactionType.INCOME),
        Transaction(id="2", date=today, amount=50000, category="Ăn uống",
                    description="Cà phê sáng", type=TransactionType.EXPENSE),
        Transaction(id="3", date=yesterday, amount=200000, category="Di chuyển",
                    description="Đổ xăng xe máy", type=TransactionType.EXPENSE),
    ]
