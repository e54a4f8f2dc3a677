# ui/tabs/analytics_tab.py
import pandas as pd
import plotly.express as px
import streamlit as st

from core.time_utils import day_window, today_iso
from services import analytics_service as an
from services.insights_service import generate_insights
from ui.deps import get_repos, get_llm

INSIGHT_ICONS = {"success": "✅", "info": "ℹ️", "warning": "⚠️", "primary": "🎯"}

@st.cache_data(ttl=30, show_spinner=False)
def _load(uid: str, today: str):
    stats_repo, tasks_repo, sessions_repo = get_repos()
    since_start, _ = day_window(an.window_start(today))
    return {
        "stats": stats_repo.list_all(uid),
        "tasks_30d": tasks_repo.list_created_since(uid, since_start),
        "sessions_30d": sessions_repo.list_started_since(uid, since_start, mode="work"),
    }

@st.cache_data(ttl=600, show_spinner=False)
def _insights(uid: str, today: str):
    data = _load(uid, today)
    summary = an.build_insights_summary(data["stats"][:30], data["tasks_30d"], data["sessions_30d"])
    return generate_insights(get_llm(), summary)

def render_analytics_tab(USER_ID: str):
    st.header("📊 Analytics Dashboard")
    today = today_iso()
    if st.button("🔄 Refresh data"):
        st.cache_data.clear()
        st.rerun()

    data = _load(USER_ID, today)
    stats = data["stats"]
    if not stats:
        st.info("No data yet. Complete a pomodoro or a task to see analytics.")
        return

    summary = an.overall_summary(stats, today)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Focus Time", f"{summary['total_focus_hours']}h")
    c2.metric("Tasks Completed", summary["tasks_completed"])
    c3.metric("Efficiency Score", f"{summary['efficiency']}%")
    c4.metric("Current Streak", f"{summary['streak']} days")

    col_l, col_r = st.columns(2)
    with col_l:
        st.subheader("This week (hours)")
        week = pd.DataFrame(an.weekly_focus_hours(stats, today)).set_index("day")
        st.bar_chart(week["hours"])
    with col_r:
        st.subheader("Task categories (30 days)")
        cats = an.category_breakdown(data["tasks_30d"])
        if cats:
            dfc = pd.DataFrame(cats)
            fig = px.pie(dfc, names="name", values="value", color="name",
                         color_discrete_map={r["name"]: r["color"] for r in cats})
            fig.update_layout(height=320, margin=dict(t=10, b=10))
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No tasks in the last 30 days.")

    st.subheader("Monthly progress")
    dfm = pd.DataFrame(an.monthly_progress(stats, today))
    fig = px.line(dfm, x="month", y=["focus", "efficiency"], markers=True)
    fig.update_layout(height=320, xaxis_title="", yaxis_title="", legend_title="")
    st.plotly_chart(fig, use_container_width=True)

    st.divider()
    st.subheader("🧠 AI Insights")
    with st.spinner("Generating insights…"):
        insights = _insights(USER_ID, today)
    cols = st.columns(2)
    for i, ins in enumerate(insights):
        with cols[i % 2]:
            st.markdown(f"{INSIGHT_ICONS.get(ins['type'], '💡')} **{ins['title']}** · `{ins['metric']}`")
            st.caption(ins["description"])
