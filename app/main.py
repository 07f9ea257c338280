import sys
import os
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.cart import ShoppingCart
from core.config import configure_logging
from core.domain import RULE_TYPES
from core.errors import CartError
from core.pricing import format_money
from core.scenarios import run_all
from core.seed import load_seed
from Receipt_Service.report import (
    line_breakdown,
    savings_summary,
    format_receipt,
)

configure_logging()


# ============ Общий каталог ============
# Один CatalogStore на все сессии: изменения цен и правил видны всем корзинам.
@st.cache_resource
def get_store():
    return load_seed()


st.set_page_config(
    page_title="Cart Pricing",
    page_icon="🛒",
    layout="wide",
    initial_sidebar_state="expanded",
)

store = get_store()

if "cart" not in st.session_state:
    st.session_state.cart = ShoppingCart(store)


def show_result(result):
    """Left -> st.error, Right -> st.success"""
    result.fold(
        lambda err: st.error(f"❌ {err}"),
        lambda value: st.success(f"✅ {value}"),
    )


# ============ HEADER ============
st.title("🛒 Расчёт корзины")
st.caption("Каталог, правила скидок и промокоды")

with st.sidebar:
    st.header("📂 Навигация")
    page = st.radio(
        "Выберите раздел:",
        ["🏪 Каталог", "📜 Правила", "🛒 Корзина", "🧪 Сценарии"],
        label_visibility="collapsed",
    )


# ============ PAGE: КАТАЛОГ ============
if page == "🏪 Каталог":
    st.header("🏪 Каталог товаров")

    slots_by_code = {code: slot for slot, code in store.slots.items()}
    for p in store.products:
        cols = st.columns([2, 4, 2])
        with cols[0]:
            st.code(slots_by_code.get(p.code, p.code))
        with cols[1]:
            st.markdown(f"**{p.name}** · `{p.code}`")
        with cols[2]:
            st.write(format_money(p.price))

    st.divider()
    st.subheader("💰 Изменить цену")
    key = st.text_input("Ключ каталога (слот или код):", "SMALL", key="price_key")
    price = st.number_input("Новая цена:", min_value=0.0, value=25.0, step=0.1)
    if st.button("Сохранить цену", key="price_btn"):
        show_result(store.update_product_price(key, str(price)))


# ============ PAGE: ПРАВИЛА ============
elif page == "📜 Правила":
    st.header("📜 Правила скидок (в порядке применения)")

    for idx, rule in enumerate(store.rules):
        params = {
            k: v
            for k, v in (
                ("x", rule.x),
                ("bulk_quantity", rule.bulk_quantity),
                ("bulk_price", rule.bulk_price),
                ("free_item", rule.free_item),
            )
            if v is not None
        }
        st.write(
            f"**{idx}.** `{rule.type}` → {', '.join(sorted(rule.applicable_to))} · {params}"
        )

    st.divider()
    st.subheader("✏️ Изменить правило")
    index = st.number_input("Индекс правила:", min_value=-1, value=0, step=1)
    rule_type = st.selectbox("Тип:", ("—",) + RULE_TYPES)
    applicable = st.text_input("Применяется к (через запятую):", "")
    x = st.number_input("x:", min_value=0, value=0, step=1)
    bulk_quantity = st.number_input("bulk_quantity:", min_value=0, value=0, step=1)
    bulk_price = st.text_input("bulk_price:", "")
    free_item = st.text_input("free_item:", "")

    if st.button("Применить", key="rule_btn"):
        fields = {}
        if rule_type != "—":
            fields["type"] = rule_type
        if applicable.strip():
            fields["applicable_to"] = [c.strip() for c in applicable.split(",") if c.strip()]
        if x:
            fields["x"] = int(x)
        if bulk_quantity:
            fields["bulk_quantity"] = int(bulk_quantity)
        if bulk_price.strip():
            fields["bulk_price"] = bulk_price.strip()
        if free_item.strip():
            fields["free_item"] = free_item.strip()
        show_result(store.update_pricing_rule(int(index), fields))


# ============ PAGE: КОРЗИНА ============
elif page == "🛒 Корзина":
    st.header("🛒 Ваша корзина")

    cart = st.session_state.cart

    col1, col2 = st.columns(2)
    with col1:
        code = st.selectbox("Товар:", [p.code for p in store.products])
    with col2:
        promo = st.text_input("Промокод (необязательно):", "")

    if st.button("➕ Добавить", type="primary"):
        try:
            cart.add(code, promo or None)
            st.success(f"✅ {store.product_name(code)}")
        except CartError as err:
            st.error(f"❌ {err}")

    if st.button("🗑️ Очистить корзину"):
        st.session_state.cart = ShoppingCart(store)
        st.rerun()

    if not cart.purchased:
        st.info("🛍️ Корзина пуста")
    else:
        st.subheader("📦 Товары")
        st.write(cart.items())

        evaluation = cart.evaluate()
        for line in line_breakdown(evaluation):
            cols = st.columns([4, 2, 2, 3])
            with cols[0]:
                st.write(f"**{line['name']}**")
            with cols[1]:
                st.write(f"× {line['quantity']}")
            with cols[2]:
                st.write(format_money(line["line_total"]))
            with cols[3]:
                st.caption(", ".join(line["rules"]) or "—")

        summary = savings_summary(evaluation)
        st.divider()
        c1, c2, c3 = st.columns(3)
        with c1:
            st.metric("Без скидок", format_money(summary["subtotal"]))
        with c2:
            st.metric("Скидки", format_money(summary["rule_savings"]))
        with c3:
            st.metric("Итого", cart.total())

        st.subheader("🧾 Итоговая корзина")
        st.write(cart.generate_final_cart())
        st.code(format_receipt(cart))


# ============ PAGE: СЦЕНАРИИ ============
elif page == "🧪 Сценарии":
    st.header("🧪 Эталонные сценарии")
    st.caption("Считаются на свежих копиях каталога, общий каталог не меняется")

    if st.button("▶️ Запустить", type="primary", key="run_scenarios"):
        for result in run_all(load_seed):
            if result.scenario.number == 5:
                st.markdown("#### После изменений владельца магазина")
            with st.container():
                st.markdown(f"**Сценарий {result.scenario.number}**")
                st.write("Товары:", list(result.items))
                st.write(f"Итого: **${result.total}**")
                st.write("Итоговая корзина:", list(result.final_cart))
                st.divider()
