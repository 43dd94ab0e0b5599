from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

import advisor

APP_PATH = str(Path(__file__).resolve().parents[1] / "streamlit_app.py")

ADVICE = advisor.AdviceResult(summary="Tài chính ổn định.", tips=["Giữ quỹ dự phòng"], sentiment="positive")


@pytest.fixture
def advice_calls(monkeypatch):
    calls = []

    async def fake_request_advice(self, transactions):
        calls.append(list(transactions))
        return ADVICE

    monkeypatch.setattr(advisor.AdviceGateway, "request_advice", fake_request_advice)
    return calls


@pytest.fixture
def app(advice_calls):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def balance_metric(at):
    return next(m.value for m in at.metric if m.label == "Số dư hiện tại")


def test_session_start_does_not_request_advice(app, advice_calls):
    assert advice_calls == []
    assert any("Phân tích ngay" in i.value for i in app.info)


def test_advice_requested_on_click(app, advice_calls):
    app.button(key="run_advice").click().run()
    assert not app.exception
    assert len(advice_calls) == 1
    assert [t.id for t in advice_calls[0]] == ["1", "2", "3"]
    assert any("Tài chính ổn định." in m.value for m in app.markdown)


def test_delete_waits_for_confirmation(app):
    store = app.session_state["store"]
    app.button(key="delete_2").click().run()
    assert store.get("2") is not None
    assert any("Bạn có chắc chắn" in w.value for w in app.warning)

    app.button(key="cancel_delete").click().run()
    assert store.get("2") is not None

    app.button(key="delete_2").click().run()
    app.button(key="confirm_delete").click().run()
    assert not app.exception
    assert store.get("2") is None


def test_views_recomputed_on_every_run(app):
    assert balance_metric(app) == "14.750.000 ₫"
    app.session_state["store"].remove("2")
    app.run()
    assert balance_metric(app) == "14.800.000 ₫"
