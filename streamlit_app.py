# streamlit_app.py
"""
SmartSpend (Streamlit): income/expense tracker with charts and an AI advisor.

Tabs: overview (totals, 6-month bars, expense donut, latest entries),
transactions (full list with delete) and AI advisor. Transactions are kept
in the JSON file named by SMARTSPEND_DATA_PATH.
"""

import asyncio
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from advisor import AdviceGateway, AdvisorSession, resolve_suggested_category
from analysis import category_shares, derive_views
from config import load_settings
from formatting import format_vnd, signed_amount
from logging_setup import configure_logging
from models import EXPENSE_CATEGORIES, INCOME_CATEGORIES, TransactionDraft, TransactionType
from storage import TransactionStore
from viz import EXPENSE_COLOR, INCOME_COLOR

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="SmartSpend", layout="wide", initial_sidebar_state="expanded")

SENTIMENT_ICONS = {"positive": "📈", "negative": "📉", "neutral": "➖"}


# -----------------------
# Session state: one store and one advisor slot per session
# -----------------------
if "store" not in st.session_state:
    store = TransactionStore(settings.data_path)
    store.load()
    st.session_state["store"] = store
    st.session_state["advisor"] = AdvisorSession(
        AdviceGateway(model=settings.model, api_key=settings.openai_api_key)
    )

store = st.session_state["store"]
advisor = st.session_state["advisor"]
# derived views follow the current snapshot and today's month on every run
views = derive_views(store.snapshot(), date.today())


def add_transaction_ui():
    st.sidebar.markdown("---")
    st.sidebar.subheader("Thêm giao dịch")

    description = st.sidebar.text_input("Mô tả", key="f_description")
    if st.sidebar.button("✨ Gợi ý danh mục", disabled=not description):
        with st.spinner("Đang gợi ý..."):
            label = asyncio.run(advisor.gateway.request_category_suggestion(description))
        resolved = resolve_suggested_category(label)
        if resolved is not None:
            st.session_state["f_type"] = resolved[1].value
            st.session_state["f_category"] = resolved[0]

    st.session_state.setdefault("f_type", TransactionType.EXPENSE.value)
    tx_type = st.sidebar.radio("Loại", [t.value for t in TransactionType], key="f_type",
                               format_func=lambda v: "Thu nhập" if v == TransactionType.INCOME.value else "Chi tiêu")
    options = INCOME_CATEGORIES if tx_type == TransactionType.INCOME.value else EXPENSE_CATEGORIES
    if st.session_state.get("f_category") not in options:
        st.session_state["f_category"] = options[0]
    category = st.sidebar.selectbox("Danh mục", options=options, key="f_category")
    amount = st.sidebar.number_input("Số tiền (VND)", min_value=0.0, step=1000.0, format="%.0f", key="f_amount")
    tx_date = st.sidebar.date_input("Ngày", value=date.today(), key="f_date")

    if st.sidebar.button("Lưu giao dịch", type="primary"):
        try:
            draft = TransactionDraft(date=tx_date, amount=amount, category=category,
                                     description=description, type=tx_type)
        except ValueError as e:
            st.sidebar.error(str(e))
            return
        store.add(draft)
        st.sidebar.success("Đã lưu")
        st.rerun()


def overview_tab():
    s = views.summary
    col1, col2, col3 = st.columns(3)
    col1.metric("Tổng thu nhập", format_vnd(s.total_income))
    col2.metric("Tổng chi tiêu", format_vnd(s.total_expense))
    col3.metric("Số dư", format_vnd(s.balance))

    left, right = st.columns([3, 2])
    with left:
        st.subheader("Thu chi 6 tháng gần nhất")
        fig = go.Figure()
        labels = [b.label for b in views.monthly]
        fig.add_bar(x=labels, y=[b.income_total for b in views.monthly], name="Thu", marker_color=INCOME_COLOR)
        fig.add_bar(x=labels, y=[b.expense_total for b in views.monthly], name="Chi", marker_color=EXPENSE_COLOR)
        fig.update_layout(barmode="group")
        st.plotly_chart(fig, use_container_width=True)
    with right:
        st.subheader("Cơ cấu chi tiêu")
        if not views.categories:
            st.info("Chưa có dữ liệu chi tiêu")
        else:
            cat_df = pd.DataFrame({
                "category": [c.category for c in views.categories],
                "amount": [c.total_amount for c in views.categories],
                "share": category_shares(views.categories, s.total_expense),
            })
            fig_cat = px.pie(cat_df, names="category", values="amount", hole=0.5,
                             color="category",
                             color_discrete_map={c.category: c.color for c in views.categories})
            st.plotly_chart(fig_cat, use_container_width=True)
            for _, row in cat_df.iterrows():
                st.write(f"{row['category']}: {row['share']}%")

    st.subheader("Giao dịch gần đây")
    recent = store.recent(5)
    if not recent:
        st.info("Chưa có giao dịch nào")
    for t in recent:
        st.write(f"**{t.description or t.category}** · {t.category} · {t.date}: {signed_amount(t)}")


def confirm_delete_ui(t):
    st.warning("Bạn có chắc chắn muốn xóa giao dịch này?")
    yes, no = st.columns([1, 6])
    if yes.button("Xóa", key="confirm_delete", type="primary"):
        st.session_state.pop("pending_delete", None)
        store.remove(t.id)
        st.rerun()
    if no.button("Hủy", key="cancel_delete"):
        st.session_state.pop("pending_delete", None)
        st.rerun()


def transactions_tab():
    txs = store.snapshot()
    if not txs:
        st.info("Danh sách trống. Hãy thêm giao dịch mới!")
        return
    for t in txs:
        col1, col2, col3, col4, col5 = st.columns([2, 3, 2, 2, 1])
        col1.write(str(t.date))
        col2.write(t.description)
        col3.write(t.category)
        col4.write(signed_amount(t))
        if col5.button("🗑️", key=f"delete_{t.id}", help="Xóa"):
            st.session_state["pending_delete"] = t.id
        if st.session_state.get("pending_delete") == t.id:
            confirm_delete_ui(t)


def advisor_tab():
    st.subheader("Trợ lý Tài chính AI")
    # only an explicit click calls the advice service
    if st.button("🔄 Phân tích ngay", key="run_advice"):
        with st.spinner("Đang phân tích..."):
            asyncio.run(advisor.refresh(store.snapshot()))
    result = advisor.latest
    if result is None:
        st.info('Nhấn nút "Phân tích ngay" để AI xem xét chi tiêu của bạn.')
        return
    st.markdown(f"### {SENTIMENT_ICONS.get(result.sentiment, '➖')} {result.summary}")
    for tip in result.tips:
        st.write(f"💡 {tip}")


# -----------------------
# Layout
# -----------------------
st.sidebar.title("SmartSpend")
st.sidebar.metric("Số dư hiện tại", format_vnd(views.summary.balance))
add_transaction_ui()

st.title("SmartSpend")
st.caption("Quản lý chi tiêu hiệu quả với SmartSpend")
tab_overview, tab_transactions, tab_ai = st.tabs(["Tổng quan", "Giao dịch", "Trợ lý AI"])
with tab_overview:
    overview_tab()
with tab_transactions:
    transactions_tab()
with tab_ai:
    advisor_tab()
