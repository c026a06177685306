"""Streamlit entry point for the accessibility reporting UI."""
from __future__ import annotations

import html
import json
from dataclasses import dataclass
from typing import List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
import streamlit.components.v1 as components

from access_audit.client.api import AuditClient
from access_audit.client.formatting import remove_scheme
from access_audit.client.knowledge import JsonKnowledgeBase, KnowledgeBase
from access_audit.client.navigator import DETAIL_CONTENT_ID, DetailNavigator
from access_audit.client.storage import LastUrlStore
from access_audit.client.store import ReportStore, StoreStatus
from access_audit.client.viewmodels import (
    AnalysisPageView,
    DetailView,
    FixesPageView,
    ImpactPageView,
    ResultCardView,
    TabLabel,
)
from access_audit.config import get_settings
from access_audit.logging import setup_logging
from access_audit.models import AuditReport, Category
from access_audit.reporting import JSONReportWriter, MarkdownReportWriter
from utils.theme_manager import ThemeManager

CARDS_PER_ROW = 3

# Arrow keys click the dialog's Back/Next buttons unless a text field has focus.
KEYBOARD_BRIDGE = """
<script>
const doc = window.parent.document;
if (!doc.__detailKeysBound) {
  doc.__detailKeysBound = true;
  doc.addEventListener('keydown', (event) => {
    const el = event.target;
    const tag = (el.tagName || '').toLowerCase();
    if (tag === 'input' || tag === 'textarea' || tag === 'select' || el.isContentEditable) return;
    const label = event.key === 'ArrowRight' ? 'Next' : event.key === 'ArrowLeft' ? 'Back' : null;
    if (!label) return;
    const button = Array.from(doc.querySelectorAll('button')).find(b => b.innerText.trim() === label);
    if (button && !button.disabled) {
      event.preventDefault();
      button.click();
    }
  });
}
</script>
"""

FOCUS_SCRIPT = """
<script>
const target = window.parent.document.getElementById('%s');
if (target) { target.focus(); }
</script>
"""


@dataclass
class UiContext:
    """Collaborators handed to every screen instead of ambient globals."""

    client: AuditClient
    url_store: LastUrlStore
    knowledge_base: KnowledgeBase


@st.cache_resource
def build_context() -> UiContext:
    settings = get_settings()
    setup_logging(settings.log_level, json_output=False)
    return UiContext(
        client=AuditClient(settings.service_url, timeout=settings.request_timeout),
        url_store=LastUrlStore(settings.state_file),
        knowledge_base=JsonKnowledgeBase(settings.knowledge_base_path),
    )


st.set_page_config(
    page_title="Accessibility Audit",
    page_icon="♿",
    layout="wide",
    initial_sidebar_state="expanded",
)

context = build_context()

# Initialize session state
if "store" not in st.session_state:
    st.session_state.store = ReportStore()
if "navigator" not in st.session_state:
    st.session_state.navigator = DetailNavigator(context.knowledge_base)
if "dark_mode" not in st.session_state:
    st.session_state.dark_mode = False
if "current_page" not in st.session_state:
    st.session_state.current_page = "Audit"

ThemeManager.apply_theme()


def create_counts_bar_chart(tabs: List[TabLabel]) -> go.Figure:
    """Bar chart of result counts per category."""
    fig = px.bar(
        x=[tab.label for tab in tabs],
        y=[tab.count for tab in tabs],
        labels={"x": "Category", "y": "Count"},
    )
    fig.update_layout(
        height=260,
        showlegend=False,
        margin=dict(l=40, r=20, t=20, b=40),
        paper_bgcolor="white",
        plot_bgcolor="white",
        font=dict(color="black", size=12),
    )
    fig.update_traces(marker=dict(color="#1976d2", line=dict(color="black", width=1)))
    return fig


def start_audit(ctx: UiContext, store: ReportStore, url: str) -> None:
    ctx.url_store.write(url)
    st.session_state.navigator.close()
    if not ctx.client.health():
        st.error("The audit service is offline or busy. Start it with `python -m access_audit serve` or try again shortly.")
        return
    with st.spinner(f"Auditing {url}..."):
        store.load(ctx.client, url)
    st.session_state.current_page = "Dashboard"
    st.rerun()


def render_audit_page(ctx: UiContext, store: ReportStore) -> None:
    st.markdown("## 🔍 Audit a Page")
    last_url = ctx.url_store.read() or ""
    url = st.text_input("Enter URL", value=last_url, placeholder="https://example.com")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("🚀 Run Audit", disabled=not url, use_container_width=True, type="primary"):
            start_audit(ctx, store, url.strip())
    with col2:
        if st.button("↩️ Resume Last Audit", disabled=not last_url, use_container_width=True):
            start_audit(ctx, store, last_url)


def render_failure(ctx: UiContext, store: ReportStore) -> None:
    st.error(f"❌ {store.failure_message}")
    if st.button("🔁 Retry", type="primary"):
        with st.spinner(f"Auditing {store.url}..."):
            store.retry(ctx.client)
        st.rerun()


def render_result_cards(store: ReportStore) -> None:
    items = store.visible_items
    label = store.filter.active_category.label
    if not items:
        st.info(f"No results found for {label}.")
        return

    for row_start in range(0, len(items), CARDS_PER_ROW):
        columns = st.columns(CARDS_PER_ROW)
        for column, item in zip(columns, items[row_start:row_start + CARDS_PER_ROW]):
            card = ResultCardView.from_item(item)
            with column:
                st.markdown(
                    f"""
                    <div class='result-card'>
                        <h4>{html.escape(card.title)}</h4>
                        <p><strong>Impact:</strong>
                           <span style='color:{card.impact_color}; text-transform:capitalize'>{html.escape(card.impact)}</span></p>
                        <p class='result-description'>{html.escape(card.description)}</p>
                    </div>
                    """,
                    unsafe_allow_html=True,
                )
                if st.button("View More", key=f"view_{label}_{card.rule_id}", use_container_width=True):
                    st.session_state.navigator.open(item)
                    st.rerun()


def render_detail_content(view: DetailView, navigator: DetailNavigator) -> None:
    content = view.content
    if isinstance(content, ImpactPageView):
        st.markdown("#### Impact")
        st.markdown(
            f"<span style='color:{content.impact_color}; text-transform:capitalize'>{html.escape(content.impact)}</span>",
            unsafe_allow_html=True,
        )
        st.markdown("#### Description")
        st.write(content.issue_explanation)
        st.markdown("#### Why This Matters")
        st.write(content.why_it_matters)
    elif isinstance(content, AnalysisPageView):
        st.markdown("#### Failure Conditions")
        st.write(content.failure_conditions)
        st.markdown("#### Common Causes")
        st.write(content.common_causes)
        st.markdown("#### Best Practices")
        if content.best_practices:
            for practice in content.best_practices:
                st.markdown(f"- {practice}")
        else:
            st.write("No data available.")
        nodes = navigator.selected_item.nodes
        if nodes:
            st.markdown("#### Affected Elements")
            st.dataframe(
                pd.DataFrame(
                    [{"Target": ", ".join(node.target), "HTML": node.html} for node in nodes]
                ),
                hide_index=True,
                use_container_width=True,
            )
    elif isinstance(content, FixesPageView):
        st.markdown("#### How To Fix")
        if content.fixes:
            for number, fix in enumerate(content.fixes, start=1):
                reference = f" ([reference]({fix.code_reference}))" if fix.code_reference else ""
                st.markdown(f"{number}. {fix.step}{reference}")
        else:
            st.write("No data available.")
        st.markdown("#### Before")
        st.code(content.code_before, language="html")
        st.markdown("#### After")
        st.code(content.code_after, language="html")


def render_detail_panel(navigator: DetailNavigator) -> None:
    view = navigator.view()
    if view is None:
        return

    st.markdown("---")
    with st.container(border=True):
        st.markdown(f"### {html.escape(view.title).title()}")
        st.caption(f"Page {view.page} of {view.page_count}")
        st.markdown(f"<div id='{DETAIL_CONTENT_ID}' tabindex='-1' aria-live='polite'></div>", unsafe_allow_html=True)
        render_detail_content(view, navigator)
        if view.resource_url:
            st.markdown(f"For more information please visit: [{view.resource_title}]({view.resource_url})")

        col_back, col_next = st.columns(2)
        with col_back:
            if st.button("Back", disabled=not view.can_go_back, use_container_width=True):
                navigator.back()
                st.rerun()
        with col_next:
            if st.button(view.primary_action, use_container_width=True, type="primary"):
                navigator.primary_action()
                st.rerun()

    components.html(KEYBOARD_BRIDGE, height=0)
    focus_target = navigator.consume_focus_request()
    if focus_target:
        components.html(FOCUS_SCRIPT % focus_target, height=0)


def render_downloads(report: AuditReport) -> None:
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "📥 Download JSON",
            data=JSONReportWriter().render(report),
            file_name="audit.json",
            mime="application/json",
            use_container_width=True,
        )
    with col2:
        st.download_button(
            "📥 Download Markdown",
            data=MarkdownReportWriter().render(report),
            file_name="audit_report.md",
            mime="text/markdown",
            use_container_width=True,
        )


def render_dashboard(ctx: UiContext, store: ReportStore) -> None:
    if store.status is StoreStatus.IDLE:
        st.info("👆 Run an audit to see results here.")
        return
    if store.status is StoreStatus.FAILED:
        render_failure(ctx, store)
        return
    if not store.is_ready:
        st.info("Audit in progress...")
        return

    st.markdown(f"## Results For {html.escape(remove_scheme(store.url or ''))}")
    tabs = store.tab_labels()
    col_score, col_chart = st.columns([1, 2])
    with col_score:
        st.markdown(
            f"<div class='score-circle'><span>{store.score.display}</span></div>",
            unsafe_allow_html=True,
        )
    with col_chart:
        st.plotly_chart(create_counts_bar_chart(tabs), use_container_width=True)

    texts = [tab.text for tab in tabs]
    selected_index = next(index for index, tab in enumerate(tabs) if tab.selected)
    chosen = st.radio("Results", texts, index=selected_index, horizontal=True, label_visibility="collapsed")
    chosen_category = tabs[texts.index(chosen)].category
    if chosen_category is not store.filter.active_category:
        store.select_category(chosen_category)
        st.session_state.navigator.close()
        st.rerun()

    tags = list(store.available_tags)
    tag = st.selectbox(
        "Filter by tag",
        tags,
        index=tags.index(store.filter.active_tag),
        format_func=lambda value: "All" if value == "all" else value,
        key=f"tag_filter_{chosen_category.value}_{id(store.report)}",
    )
    if tag != store.filter.active_tag:
        store.select_tag(tag)
        st.rerun()

    st.markdown(f"### {store.filter.active_category.label}")
    render_result_cards(store)
    render_detail_panel(st.session_state.navigator)

    st.markdown("---")
    render_downloads(store.report)
    with st.expander("Raw report"):
        st.code(json.dumps(store.report.to_dict(), indent=2), language="json")


# Sidebar Navigation
with st.sidebar:
    st.markdown("<h2 style='text-align: center;'>♿ Accessibility Audit</h2>", unsafe_allow_html=True)
    for display_name, page_name in {"🔍 Audit": "Audit", "📊 Dashboard": "Dashboard"}.items():
        if st.button(display_name, key=f"nav_{page_name}", use_container_width=True):
            st.session_state.current_page = page_name
            st.rerun()
    st.session_state.dark_mode = st.toggle("Dark mode", value=st.session_state.dark_mode)

    store: ReportStore = st.session_state.store
    if store.is_ready:
        st.markdown("---")
        st.metric("Accessibility Score", store.score.display)
        st.metric("Violations", len(store.report.items(Category.VIOLATIONS)))

if st.session_state.current_page == "Audit":
    render_audit_page(context, st.session_state.store)
else:
    render_dashboard(context, st.session_state.store)
