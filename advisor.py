# advisor.py
# The gateway never raises to its callers: transport errors, empty replies and
# replies that do not match the expected JSON shape turn into a neutral
# fallback result, or the fallback category for suggestions.
import re
from collections.abc import Sequence
from typing import Any, Literal

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from config import DEFAULT_MODEL
from logging_setup import get_logger
from models import EXPENSE_CATEGORIES, INCOME_CATEGORIES, Transaction, TransactionType

logger = get_logger("smartspend.advisor")

MAX_ADVICE_TRANSACTIONS = 50
FALLBACK_CATEGORY = "Khác"

SUGGESTABLE_CATEGORIES = [
    "Ăn uống", "Di chuyển", "Nhà cửa", "Mua sắm", "Giải trí", "Sức khỏe",
    "Giáo dục", "Hóa đơn & Tiện ích", "Lương", "Thưởng", "Đầu tư", "Khác",
]


class AdviceResult(BaseModel):
    summary: str
    tips: list[str]
    sentiment: Literal["positive", "neutral", "negative"]


NO_DATA_RESULT = AdviceResult(
    summary="Chưa có dữ liệu giao dịch để phân tích.",
    tips=["Hãy thêm giao dịch đầu tiên của bạn để nhận lời khuyên."],
    sentiment="neutral",
)

UNAVAILABLE_RESULT = AdviceResult(
    summary="Không thể kết nối với chuyên gia AI lúc này.",
    tips=["Vui lòng thử lại sau."],
    sentiment="neutral",
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def recent_transactions(
    transactions: Sequence[Transaction], limit: int = MAX_ADVICE_TRANSACTIONS
) -> list[Transaction]:
    """The ``limit`` most recent records (collections are kept newest first)."""
    return list(transactions[:limit])


def _plain_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def render_transactions(transactions: Sequence[Transaction]) -> str:
    return "\n".join(
        f"{t.date.isoformat()}: {t.type.value} - {_plain_amount(t.amount)} VND ({t.category}) - {t.description}"
        for t in transactions
    )


def build_advice_prompt(transactions: Sequence[Transaction]) -> str:
    return f"""
        Bạn là một chuyên gia tài chính cá nhân. Hãy phân tích dữ liệu giao dịch dưới đây và đưa ra nhận xét bằng tiếng Việt.
        Dữ liệu:
        {render_transactions(transactions)}

        Hãy trả về JSON theo cấu trúc sau:
        {{
          "summary": "Tóm tắt ngắn gọn về tình hình tài chính (dưới 50 từ)",
          "tips": ["Lời khuyên 1", "Lời khuyên 2", "Lời khuyên 3"],
          "sentiment": "positive" | "neutral" | "negative" (dựa trên sức khỏe tài chính)
        }}
    """


def build_category_prompt(description: str) -> str:
    return f"""
        Dựa trên mô tả giao dịch: "{description}", hãy gợi ý một danh mục chi tiêu/thu nhập phù hợp nhất từ danh sách sau:
        [{", ".join(SUGGESTABLE_CATEGORIES)}].
        Chỉ trả về tên danh mục duy nhất, không có thêm văn bản nào khác.
    """


def parse_advice(text: str | None) -> AdviceResult:
    """Validate the model's JSON reply. Raises ``ValueError`` on anything unusable."""
    if not text or not text.strip():
        raise ValueError("empty response from advice service")
    body = text.strip()
    m = _FENCE_RE.match(body)
    if m:
        body = m.group(1)
    try:
        return AdviceResult.model_validate_json(body)
    except ValidationError as e:
        raise ValueError(f"unexpected advice payload: {e}") from e


def resolve_suggested_category(label: str) -> tuple[str, TransactionType] | None:
    """Map a suggested label onto a known category and the type it implies.

    Unknown labels give ``None`` and should not be applied. A label listed
    for both types resolves to an expense.
    """
    label = (label or "").strip()
    if label in EXPENSE_CATEGORIES:
        return label, TransactionType.EXPENSE
    if label in INCOME_CATEGORIES:
        return label, TransactionType.INCOME
    return None


class AdviceGateway:
    """
    Adapter around the OpenAI Responses API. ``client`` is any
    ``AsyncOpenAI``-shaped object; without one, a client is opened from
    ``api_key`` for each request.
    """

    def __init__(self, client: Any = None, *, model: str = DEFAULT_MODEL, api_key: str | None = None) -> None:
        self._client = client
        self._api_key = api_key
        self.model = model

    async def _complete(self, prompt: str) -> str:
        if self._client is not None:
            resp = await self._client.responses.create(model=self.model, input=prompt)
        else:
            # one client per call: callers may drive each request with its own event loop
            async with AsyncOpenAI(api_key=self._api_key) as client:
                resp = await client.responses.create(model=self.model, input=prompt)
        return resp.output_text or ""

    async def request_advice(self, transactions: Sequence[Transaction]) -> AdviceResult:
        if not transactions:
            return NO_DATA_RESULT
        try:
            text = await self._complete(build_advice_prompt(transactions))
            result = parse_advice(text)
        except (OpenAIError, ValueError) as e:
            logger.warning("Advice request failed: %s", e)
            return UNAVAILABLE_RESULT
        logger.info("Received advice (%s, %d tips)", result.sentiment, len(result.tips))
        return result

    async def request_category_suggestion(self, description: str) -> str:
        if not description or not description.strip():
            return ""
        try:
            text = await self._complete(build_category_prompt(description))
        except OpenAIError as e:
            logger.warning("Category suggestion failed: %s", e)
            return FALLBACK_CATEGORY
        return text.strip() or FALLBACK_CATEGORY


class AdvisorSession:
    """Holds the latest advice result. A finished request overwrites it."""

    def __init__(self, gateway: AdviceGateway) -> None:
        self.gateway = gateway
        self.latest: AdviceResult | None = None

    async def refresh(self, transactions: Sequence[Transaction]) -> AdviceResult:
        result = await self.gateway.request_advice(recent_transactions(transactions))
        self.latest = result
        return result
