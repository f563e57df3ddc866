"""
learnpath - Topic Learning Pages

Streamlit application rendering one topic page at a time on top of the
progress engine and the cross-topic trainer profile.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from learnpath.classroom import (
    SQLiteStorage,
    TrainerAggregator,
    TopicProgressEngine,
    Navigator,
    PartAvailability,
    INSIGHT_XP,
)
from learnpath.config import load_settings
from learnpath.utils import load_topic, get_available_topics
from learnpath.viewer import get_code_css, compute_drives, render_radar_svg


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

SETTINGS = load_settings()

logging.basicConfig(
    level=SETTINGS.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s"
)

st.set_page_config(
    page_title="learnpath",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def toast_notifier(text: str, kind: str):
    """Surface XP and badge awards as Streamlit toasts."""
    st.toast(text, icon="🏅" if kind == "badge" else "⚡")


def init_session_state():
    """Initialize session state variables."""
    if "storage" not in st.session_state:
        st.session_state.storage = SQLiteStorage(SETTINGS.db_path)

    if "trainer" not in st.session_state:
        st.session_state.trainer = TrainerAggregator(st.session_state.storage)

    if "engines" not in st.session_state:
        st.session_state.engines = {}

    if "topic_name" not in st.session_state:
        topics = get_available_topics(SETTINGS.topics_dir)
        st.session_state.topic_name = topics[0] if topics else None


def get_engine(topic_name: str) -> TopicProgressEngine:
    """Engine for a topic, built once per session."""
    engines = st.session_state.engines
    if topic_name not in engines:
        config = load_topic(topic_name, SETTINGS.topics_dir)
        engines[topic_name] = TopicProgressEngine(
            config,
            st.session_state.storage,
            trainer=st.session_state.trainer,
            notifier=toast_notifier,
        )
    return engines[topic_name]


# -----------------------------------------------------------------------------
# Sidebar: Trainer Profile & Parts
# -----------------------------------------------------------------------------

def render_sidebar(engine: TopicProgressEngine):
    """Render the sidebar with trainer profile, part list and backup."""
    trainer = st.session_state.trainer
    nav = Navigator(engine)

    st.sidebar.title("🎓 learnpath")

    topics = get_available_topics(SETTINGS.topics_dir)
    selected = st.sidebar.selectbox(
        "Topic",
        topics,
        index=topics.index(st.session_state.topic_name),
    )
    if selected != st.session_state.topic_name:
        st.session_state.topic_name = selected
        st.rerun()

    # Trainer profile
    level = trainer.get_level()
    next_level = trainer.get_next_level()
    state = trainer.state
    st.sidebar.markdown(f"**{level.icon} Lv.{level.level} {level.name}**")
    st.sidebar.progress(trainer.level_progress())
    if next_level:
        st.sidebar.caption(f"{state.global_xp} / {next_level.xp} XP to {next_level.name}")
    else:
        st.sidebar.caption(f"{state.global_xp} XP, top level reached")
    if state.streak > 0:
        st.sidebar.markdown(f"🔥 {state.streak}-day streak")
    if not trainer.storage_available:
        st.sidebar.warning("Progress storage is unavailable; nothing will be saved.")

    st.sidebar.divider()

    # Part list
    stats = nav.get_progress_summary()
    st.sidebar.markdown(
        f"**Progress:** {stats['completed']}/{stats['total_parts']} parts ({stats['completion_percent']}%)"
    )
    st.sidebar.progress(stats['completion_percent'] / 100)

    for nav_part in nav.get_navigation_tree():
        part = nav_part.part
        indicator = nav.get_status_indicator(part.id)
        locked = nav_part.availability == PartAvailability.LOCKED
        label = f"{indicator} {part.icon} Part {part.id}: {part.title}"
        if st.sidebar.button(label, key=f"part_{part.id}", disabled=locked, use_container_width=True):
            engine.navigate_to(part.id)
            st.rerun()

    st.sidebar.divider()

    # Badges
    topic_state = engine.state
    st.sidebar.markdown(
        " ".join(
            badge.icon if badge.id in topic_state.badges else "▫️"
            for badge in engine.config.badges
        )
    )
    st.sidebar.caption(
        f"⚡ XP: {stats['xp']} / {stats['total_xp']} · 🏅 Badges: {stats['badges']} / {stats['total_badges']}"
    )

    render_backup_section()


def render_backup_section():
    """Export/import of the whole trainer profile."""
    trainer = st.session_state.trainer

    with st.sidebar.expander("Backup"):
        st.download_button(
            "Export progress",
            data=trainer.export_data(),
            file_name="learnpath-profile.json",
            mime="application/json",
            use_container_width=True,
        )
        uploaded = st.file_uploader("Import progress", type=["json"])
        if uploaded is not None and st.button("Apply import", use_container_width=True):
            if trainer.import_data(uploaded.getvalue().decode("utf-8")):
                # Engines reload from the imported entries
                st.session_state.engines = {}
                st.success("Progress imported.")
                st.rerun()
            else:
                st.error("Import failed: the file is not a valid progress export.")


# -----------------------------------------------------------------------------
# Main Content: Part View
# -----------------------------------------------------------------------------

def render_opening(engine: TopicProgressEngine):
    """Opening screen shown until the learner starts the journey."""
    st.title(engine.config.title or engine.config.id)
    st.markdown(f"{len(engine.config.parts)} parts · {engine.config.total_xp} XP to earn")
    if st.button("Start the journey", type="primary"):
        engine.start_journey()
        st.rerun()


def render_part_view(engine: TopicProgressEngine):
    """Render the current part with its actions."""
    state = engine.state
    part = engine.config.get_part(state.current_part)
    if part is None:
        st.error(f"Part not found: {state.current_part}")
        return

    nav = Navigator(engine)
    pos, total = nav.get_part_position(part.id)
    st.caption(f"Part {pos} of {total}")
    st.header(f"{part.icon} {part.title}")

    if part.content:
        st.markdown(part.content)
    if part.code:
        st.markdown(get_code_css(), unsafe_allow_html=True)
        st.markdown(engine.code_block(part.code), unsafe_allow_html=True)

    for insight in part.insights:
        opened_before = insight.id in state.expanded_insights
        label = "★ Dig deeper" + ("" if opened_before else f" (+{INSIGHT_XP} XP)")
        if st.button(label, key=f"insight_{insight.id}"):
            engine.expand_insight(insight.id)
            st.rerun()
        if engine.is_insight_open(insight.id):
            st.info(insight.text)

    st.divider()
    col1, col2, col3 = st.columns(3)

    with col1:
        if part.id in state.read_parts:
            st.success("Read ✓")
        elif st.button("Mark as read", use_container_width=True):
            engine.mark_read(part.id)
            st.rerun()

    with col2:
        if part.id in state.completed_parts:
            st.success("Quiz passed ✓")
        elif st.button("Pass the quiz", type="primary", use_container_width=True):
            engine.complete_part(part.id)
            st.rerun()

    with col3:
        if part.id in state.briefings_read:
            st.success("Briefing done ✓")
        elif st.button("Brief your lead", use_container_width=True):
            engine.mark_briefing_read(part.id)
            st.rerun()

    next_id = nav.get_next_part_id(part.id)
    if next_id and nav.is_part_available(next_id):
        if st.button("Next →"):
            engine.navigate_to(next_id)
            st.rerun()

    render_summary(engine)


def render_summary(engine: TopicProgressEngine):
    """Octalysis radar and footer counters."""
    state = engine.state
    summary = Navigator(engine).get_progress_summary()
    drives = compute_drives(state, engine.config, st.session_state.trainer.state.streak)

    st.divider()
    st.subheader("Octalysis Drives")
    st.markdown(render_radar_svg(drives), unsafe_allow_html=True)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Parts", f"{summary['completed']}/{summary['total_parts']}")
    col2.metric("XP", summary['xp'])
    col3.metric("Badges", summary['badges'])
    col4.metric("Completion", f"{summary['completion_percent']}%")


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()

    if not st.session_state.topic_name:
        st.error(f"No topic configurations found in {SETTINGS.topics_dir}")
        return

    engine = get_engine(st.session_state.topic_name)
    render_sidebar(engine)

    if not engine.state.opening_done:
        render_opening(engine)
    else:
        render_part_view(engine)


if __name__ == "__main__":
    main()
