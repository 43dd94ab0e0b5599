# cli.py
import argparse
import asyncio
from datetime import date

from advisor import AdviceGateway, AdvisorSession, resolve_suggested_category
from analysis import category_shares, derive_views
from config import load_settings
from formatting import format_vnd, signed_amount
from logging_setup import configure_logging
from models import TransactionDraft, TransactionType
from storage import TransactionStore


def open_store(args) -> TransactionStore:
    store = TransactionStore(args.data)
    store.load()
    return store


def cmd_add(args, parser):
    tx_date = args.date or date.today()
    try:
        draft = TransactionDraft(date=tx_date, amount=args.amount, category=args.category,
                                 description=args.description, type=args.type)
    except ValueError as e:
        parser.error(str(e))
    store = open_store(args)
    tx = store.add(draft)
    print(f"Saved: {tx.id} {tx.date} {signed_amount(tx)} {tx.category} {tx.description}")


def cmd_list(args, parser):
    store = open_store(args)
    txs = store.recent(args.limit) if args.limit else store.snapshot()
    if not txs:
        print("Danh sách trống. Hãy thêm giao dịch mới!")
        return
    for t in txs:
        print(f"{t.id:<36}  {t.date}  {signed_amount(t):>15}  {t.category:<20} {t.description}")


def cmd_delete(args, parser):
    store = open_store(args)
    if store.remove(args.id):
        print(f"Deleted {args.id}")
    else:
        print(f"No transaction with id {args.id}")


def cmd_summary(args, parser):
    store = open_store(args)
    ref = args.date or date.today()
    views = derive_views(store.snapshot(), ref)
    s = views.summary
    print(f"Tổng thu nhập: {format_vnd(s.total_income)}")
    print(f"Tổng chi tiêu: {format_vnd(s.total_expense)}")
    print(f"Số dư:         {format_vnd(s.balance)}")
    print()
    if views.categories:
        shares = category_shares(views.categories, s.total_expense)
        for slice_, pct in zip(views.categories, shares):
            print(f"  {slice_.category:<20} {format_vnd(slice_.total_amount):>18}  {pct:>3}%")
    else:
        print("  Chưa có dữ liệu chi tiêu")
    print()
    for b in views.monthly:
        print(f"  {b.label:>7}  thu {format_vnd(b.income_total):>18}  chi {format_vnd(b.expense_total):>18}")


def cmd_show(args, parser):
    import matplotlib.pyplot as plt
    from viz import plot_category_pie, plot_monthly_trend

    store = open_store(args)
    views = derive_views(store.snapshot(), date.today())
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    plot_monthly_trend(views.monthly, ax=ax1)
    plot_category_pie(views.categories, ax=ax2)
    plt.show()


def _gateway():
    settings = load_settings()
    return AdviceGateway(model=settings.model, api_key=settings.openai_api_key)


def cmd_advise(args, parser):
    store = open_store(args)
    session = AdvisorSession(_gateway())
    result = asyncio.run(session.refresh(store.snapshot()))
    print(f"[{result.sentiment}] {result.summary}")
    for i, tip in enumerate(result.tips, 1):
        print(f"  {i}. {tip}")


def cmd_suggest(args, parser):
    label = asyncio.run(_gateway().request_category_suggestion(args.text))
    resolved = resolve_suggested_category(label)
    if resolved is None:
        print(f"No known category suggested (got {label!r})")
        return
    category, tx_type = resolved
    print(f"{category} ({tx_type.value})")


def build_parser():
    settings = load_settings()
    p = argparse.ArgumentParser("smartspend")
    p.add_argument("--data", default=settings.data_path, help="Path of the saved transactions JSON file")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd")
    a = sub.add_parser("add")
    a.add_argument("amount", type=float, help="Amount (non-negative number).")
    a.add_argument("category", help="Category label, e.g. 'Ăn uống'")
    a.add_argument("--type", choices=[t.value for t in TransactionType], default=TransactionType.EXPENSE.value)
    a.add_argument("--date", type=date.fromisoformat, help="ISO date, e.g. 2024-01-20", default=None)
    a.add_argument("--description", default="", help="Optional description")
    ls = sub.add_parser("list")
    ls.add_argument("--limit", type=int, default=None)
    d = sub.add_parser("delete")
    d.add_argument("id")
    s = sub.add_parser("summary")
    s.add_argument("--date", type=date.fromisoformat, default=None, help="Reference date for the 6-month trend")
    sub.add_parser("show")
    sub.add_parser("advise")
    sg = sub.add_parser("suggest")
    sg.add_argument("text", help="Transaction description")
    return p


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "delete": cmd_delete,
    "summary": cmd_summary,
    "show": cmd_show,
    "advise": cmd_advise,
    "suggest": cmd_suggest,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    handler = COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return
    handler(args, parser)


if __name__ == "__main__":
    main()
