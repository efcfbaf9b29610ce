"""
app.py
Streamlit Fight Gym dashboard (trainer + student views).
Run: streamlit run app.py
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime

import pandas as pd
import streamlit as st

import actions
import auth
import metrics
import seed
import utils
from config import configure_logging, load_settings
from models import PaymentMethod, Student, Trainer

logger = logging.getLogger(__name__)

LEVEL_LABELS = {"beginner": "Beginner", "intermediate": "Intermediate", "advanced": "Advanced", "expert": "Expert"}


def init_once():
    # One gateway (and one Session) per browser session
    if "gateway" in st.session_state:
        return
    settings = load_settings()
    configure_logging(settings.log_level)
    repo = seed.build_repository()
    gateway = auth.init_auth(repo, settings, seed.DEFAULT_PASSWORD)
    asyncio.run(gateway.restore())
    st.session_state.settings = settings
    st.session_state.repo = repo
    st.session_state.gateway = gateway
    st.session_state.events = list(seed.EVENTS)


def logout():
    asyncio.run(st.session_state.gateway.logout())
    st.success("Logged out.")


def login_screen():
    st.title("🥊 Fight Gym Login")

    col1, col2 = st.columns([1, 1])
    with col1:
        role = st.radio("I am a", ["student", "trainer"], horizontal=True)
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.button("Login", type="primary"):
            if not email.strip() or not password:
                st.error("Please fill in email and password.")
            elif asyncio.run(st.session_state.gateway.login(email.strip(), password, role)):
                st.rerun()
            else:
                st.error("Invalid email or password.")

    with col2:
        st.info(
            "Demo accounts (password **123456**):\n\n"
            "- trainer: **carlos@centralfight.com**\n"
            "- student: **joao@email.com**"
        )


def _money(value) -> str:
    return f"R$ {float(value):.2f}"


def _payments_frame(payments, now) -> pd.DataFrame:
    df = utils.payments_to_frame(payments)
    if not df.empty:
        df["label"] = [metrics.payment_label(p, now) for p in payments]
    return df


def trainer_dashboard(trainer: Trainer):
    repo = st.session_state.repo
    settings = st.session_state.settings
    now = datetime.now()
    summary = metrics.trainer_summary(repo, trainer.id, now, settings.leaderboard_size)

    st.header(f"📊 Dashboard - {trainer.gym_name}")
    st.caption(f"Hello, {trainer.name}!")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total students", summary.student_count)
    c2.metric("Active", summary.status_counts["active"])
    c3.metric("Overdue", summary.status_counts["overdue"])
    c4.metric("Check-ins today", summary.todays_check_ins)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total revenue", _money(summary.total_revenue))
    c2.metric("Pending revenue", _money(summary.pending_revenue))
    c3.metric("This month", _money(summary.month_revenue))
    c4.metric("Average ticket", _money(summary.average_ticket))

    st.divider()

    left, right = st.columns(2)
    with left:
        st.subheader("🏆 Points ranking")
        st.dataframe(
            pd.DataFrame(
                [{"student": s.name, "points": s.points, "level": LEVEL_LABELS[s.level.value]} for s in summary.leaderboard]
            ),
            use_container_width=True,
            hide_index=True,
        )
    with right:
        st.subheader("📅 Attendance ranking")
        st.dataframe(
            pd.DataFrame([{"student": s.name, "check-ins": n} for s, n in summary.attendance_ranking]),
            use_container_width=True,
            hide_index=True,
        )
        st.caption(f"Average check-ins per student this month: {summary.average_attendance:.1f}")

    st.subheader("Levels / modalities")
    c1, c2 = st.columns(2)
    c1.bar_chart(pd.Series(summary.level_distribution, name="students"))
    c2.bar_chart(pd.Series(summary.fight_styles, name="students"))

    st.divider()

    st.subheader("👥 Students")
    c1, c2 = st.columns([2, 1])
    with c1:
        search = st.text_input("Search (name/email)")
    with c2:
        status = st.selectbox("Status", ["all", "active", "overdue", "suspended"])
    students = metrics.search_students(
        repo.students_for_trainer(trainer.id), search, None if status == "all" else status
    )
    st.dataframe(utils.students_to_frame(students), use_container_width=True, hide_index=True)

    st.divider()

    st.subheader("💳 Financial")
    period = st.radio("Revenue by", list(utils.PERIODS), index=1, horizontal=True)
    chart = utils.revenue_by_period(repo.payments_for_trainer(trainer.id), now, period)
    if not chart.empty:
        st.bar_chart(chart.set_index("label")["revenue"])

    if summary.overdue_payments:
        st.warning(f"{len(summary.overdue_payments)} overdue payment(s)")
        st.dataframe(_payments_frame(summary.overdue_payments, now), use_container_width=True, hide_index=True)
    else:
        st.caption("No overdue payments.")

    st.download_button(
        "Download students.csv",
        data=utils.students_to_csv_bytes(repo.students_for_trainer(trainer.id)),
        file_name="students.csv",
        mime="text/csv",
    )
    st.download_button(
        "Download payments.csv",
        data=utils.payments_to_csv_bytes(repo.payments_for_trainer(trainer.id)),
        file_name="payments.csv",
        mime="text/csv",
    )


def _check_in_section(student: Student, now: datetime):
    st.subheader("✅ Check-in")
    kind = st.selectbox("Type", [t.value for t in actions.CHECK_IN_POINTS], key="checkin_type")
    if st.button("Check in now", type="primary"):
        check_in, updated = actions.record_check_in(student, now, kind)
        st.session_state.repo = st.session_state.repo.with_records(students=[updated], check_ins=[check_in])
        st.toast(f"Check-in done! +{check_in.points} points 🥊")
        st.rerun()


def _pay_section(pending, now: datetime):
    if not pending:
        return
    st.subheader("Pending payments")
    for p in pending:
        c1, c2, c3 = st.columns([2, 2, 1])
        c1.write(f"{_money(p.amount)} · due {p.due_date.isoformat()} · {metrics.payment_label(p, now)}")
        method = c2.selectbox("Method", [m.value for m in PaymentMethod], key=f"method_{p.id}")
        if c3.button("Pay", key=f"pay_{p.id}"):
            paid = actions.pay(p, method, now)
            st.session_state.repo = st.session_state.repo.with_records(payments=[paid])
            st.toast(f"Payment of {_money(paid.amount)} processed via {paid.method.value}.")
            st.rerun()


def _events_section():
    st.subheader("🏟️ Events")
    events = st.session_state.events
    for i, event in enumerate(events):
        places = "" if event.max_participants is None else f"/{event.max_participants}"
        c1, c2 = st.columns([4, 1])
        c1.write(
            f"**{event.title}** · {event.date.isoformat()} · {event.location} · "
            f"{event.current_participants}{places} participants · {_money(event.price)}"
        )
        label = "Cancel" if event.is_registered else "Register"
        if c2.button(label, key=f"event_{event.id}"):
            try:
                events[i] = (
                    actions.cancel_registration(event) if event.is_registered else actions.register_for_event(event)
                )
            except actions.EventFullError:
                st.error("This event is full.")
            else:
                st.rerun()


def student_dashboard(student: Student):
    repo = st.session_state.repo
    settings = st.session_state.settings
    now = datetime.now()
    summary = metrics.student_summary(
        repo, student.id, now, settings.first_weekday, settings.session_goal, settings.points_goal
    )
    if summary is None:
        st.error("Student record not found.")
        return
    # Repository copy carries points/payments recorded during this session
    student = summary.student

    st.header(f"🥋 Hello, {student.name}!")
    st.caption(f"{student.fight_style} · {student.category} · plan {student.plan.name}")

    c1, c2, c3 = st.columns(3)
    c1.metric("Points", student.points)
    c2.metric("Level", LEVEL_LABELS[student.level.value])
    c3.metric("Payment", student.payment_status.value)

    if summary.level_progress is not None:
        st.progress(summary.level_progress / 100)
        st.caption(f"{summary.level_progress:.0f}% to {LEVEL_LABELS.get(summary.next_level, summary.next_level)}")

    st.divider()

    _check_in_section(student, now)

    c1, c2, c3 = st.columns(3)
    c1.metric("This week", summary.check_in_buckets["week"])
    c2.metric("This month", summary.check_in_buckets["month"])
    c3.metric("Total check-ins", summary.check_in_count)

    st.subheader("🎯 Monthly goals")
    goals = summary.goals
    st.write(f"{goals['sessions']}/{goals['sessions_goal']} sessions")
    st.progress(goals["sessions_progress"] / 100)
    st.write(f"{goals['points']}/{goals['points_goal']} points")
    st.progress(goals["points_progress"] / 100)

    st.subheader("Recent check-ins")
    if summary.recent_check_ins:
        st.dataframe(
            pd.DataFrame(
                [{"date": c.date.isoformat(), "type": c.type.value, "points": c.points} for c in summary.recent_check_ins]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No check-ins yet.")

    st.subheader("💳 Payments")
    _pay_section(summary.pending_payments, now)
    payments = summary.pending_payments + summary.paid_payments
    if payments:
        st.dataframe(_payments_frame(payments, now), use_container_width=True, hide_index=True)
    else:
        st.caption("No payments yet.")

    st.divider()
    _events_section()


def change_password(gateway: auth.AuthGateway, new_password: str, confirm: str) -> str | None:
    """Validate and store a new password. Returns an error message, or None when saved."""
    if len(new_password) < 6:
        return "Password must be at least 6 characters."
    if new_password != confirm:
        return "Passwords do not match."
    try:
        asyncio.run(gateway.change_password(new_password))
    except sqlite3.Error:
        logger.exception("Could not store the new password")
        return "Could not update password. Please try again."
    return None


def settings_page():
    st.header("⚙️ Settings")

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password")
    p2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password", type="primary"):
        error = change_password(st.session_state.gateway, p1, p2)
        if error:
            st.error(error)
        else:
            st.success("Password updated.")


def main_app():
    user = st.session_state.gateway.session.user

    st.sidebar.title("🥊 Fight Gym")
    st.sidebar.caption(f"Logged in as: {user.name} ({user.kind.value})")

    pages = ["Dashboard", "Settings"]
    page = st.sidebar.radio("Navigate", pages)

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    if page == "Settings":
        settings_page()
    elif isinstance(user, Trainer):
        trainer_dashboard(user)
    else:
        student_dashboard(user)


# --------- App entry ---------

def run():
    st.set_page_config(page_title="Fight Gym Manager", layout="wide")
    init_once()

    if not st.session_state.gateway.session.is_authenticated:
        login_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
