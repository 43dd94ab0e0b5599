import asyncio
import json

import pytest
from openai import OpenAIError

from advisor import (
    FALLBACK_CATEGORY,
    MAX_ADVICE_TRANSACTIONS,
    NO_DATA_RESULT,
    UNAVAILABLE_RESULT,
    AdviceGateway,
    AdvisorSession,
    parse_advice,
    recent_transactions,
    render_transactions,
    resolve_suggested_category,
)
from models import Transaction, TransactionType
from tests.helpers.openai_stub import AsyncOpenAIStub

GOOD_REPLY = json.dumps({
    "summary": "Chi tiêu hợp lý.",
    "tips": ["Tiết kiệm 20%", "Hạn chế ăn ngoài", "Lập quỹ dự phòng"],
    "sentiment": "positive",
})


def txs(n=2):
    return [
        Transaction(id=str(i), date="2024-01-15", amount=1000 + i, category="Ăn uống",
                    description=f"mục {i}", type=TransactionType.EXPENSE)
        for i in range(n)
    ]


def run(coro):
    return asyncio.run(coro)


def test_empty_input_returns_no_data_without_calling():
    stub = AsyncOpenAIStub(GOOD_REPLY)
    result = run(AdviceGateway(stub).request_advice([]))
    assert result == NO_DATA_RESULT
    assert result.sentiment == "neutral"
    assert stub.calls == []


def test_advice_parsed_from_reply():
    stub = AsyncOpenAIStub(GOOD_REPLY)
    result = run(AdviceGateway(stub, model="test-model").request_advice(txs()))
    assert result.sentiment == "positive"
    assert len(result.tips) == 3
    assert stub.calls[0]["model"] == "test-model"
    assert "2024-01-15: EXPENSE - 1000 VND (Ăn uống) - mục 0" in stub.calls[0]["input"]


def test_advice_reply_in_code_fence():
    stub = AsyncOpenAIStub(f"```json\n{GOOD_REPLY}\n```")
    assert run(AdviceGateway(stub).request_advice(txs())).summary == "Chi tiêu hợp lý."


@pytest.mark.parametrize("reply", [
    "",
    None,
    "not json",
    json.dumps({"summary": "x", "tips": ["a"], "sentiment": "ecstatic"}),
    json.dumps({"summary": "x"}),
    OpenAIError("connection reset"),
])
def test_failures_become_neutral_fallback(reply):
    result = run(AdviceGateway(AsyncOpenAIStub(reply)).request_advice(txs()))
    assert result == UNAVAILABLE_RESULT
    assert result.sentiment == "neutral"


def test_parse_advice_rejects_blank():
    with pytest.raises(ValueError):
        parse_advice("   ")


def test_render_transactions_one_line_each():
    lines = render_transactions(txs(3)).splitlines()
    assert len(lines) == 3
    assert lines[2] == "2024-01-15: EXPENSE - 1002 VND (Ăn uống) - mục 2"


def test_category_suggestion():
    stub = AsyncOpenAIStub("  Di chuyển\n")
    assert run(AdviceGateway(stub).request_category_suggestion("Đổ xăng")) == "Di chuyển"
    assert "Đổ xăng" in stub.calls[0]["input"]


def test_category_suggestion_failures():
    assert run(AdviceGateway(AsyncOpenAIStub(OpenAIError("down"))).request_category_suggestion("taxi")) == FALLBACK_CATEGORY
    assert run(AdviceGateway(AsyncOpenAIStub("")).request_category_suggestion("taxi")) == FALLBACK_CATEGORY


def test_blank_description_skips_call():
    stub = AsyncOpenAIStub("Ăn uống")
    assert run(AdviceGateway(stub).request_category_suggestion("  ")) == ""
    assert stub.calls == []


def test_resolve_suggested_category():
    assert resolve_suggested_category("Lương") == ("Lương", TransactionType.INCOME)
    assert resolve_suggested_category(" Ăn uống ") == ("Ăn uống", TransactionType.EXPENSE)
    assert resolve_suggested_category("Khác") == ("Khác", TransactionType.EXPENSE)
    assert resolve_suggested_category("Crypto moon") is None
    assert resolve_suggested_category("") is None


def test_recent_transactions_caps_at_fifty():
    many = txs(MAX_ADVICE_TRANSACTIONS + 10)
    capped = recent_transactions(many)
    assert len(capped) == MAX_ADVICE_TRANSACTIONS
    assert capped[0].id == "0"


def test_session_keeps_latest_result_and_caps_input():
    stub = AsyncOpenAIStub(GOOD_REPLY)
    session = AdvisorSession(AdviceGateway(stub))
    assert session.latest is None
    run(session.refresh(txs(MAX_ADVICE_TRANSACTIONS + 5)))
    assert session.latest.sentiment == "positive"
    assert stub.calls[0]["input"].count("EXPENSE -") == MAX_ADVICE_TRANSACTIONS

    stub.reply = OpenAIError("down")
    run(session.refresh(txs()))
    assert session.latest == UNAVAILABLE_RESULT
