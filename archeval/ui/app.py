# archeval/ui/app.py
import streamlit as st
import requests

from archeval.config import API_BASE
from archeval.ui.formatting import bold_segments, score_percent, split_explanation

LIKERT_LABELS = {
    1: "Strongly Disagree",
    2: "Disagree",
    3: "Neutral",
    4: "Agree",
    5: "Strongly Agree",
}

TIMEOUT = 60

st.set_page_config(page_title="ArchEval - SLM vs LLM", layout="wide")


@st.cache_data(ttl=300)
def load_questions():
    response = requests.get(f"{API_BASE}/questions", timeout=TIMEOUT)
    response.raise_for_status()
    return response.json()


def render_explanation(text: str):
    intro, bullets = split_explanation(text)

    def to_markdown(line: str) -> str:
        return "".join(f"**{part}**" if bold else part for part, bold in bold_segments(line))

    if intro:
        st.info(to_markdown(intro))
    for bullet in bullets:
        st.markdown(f"- {to_markdown(bullet)}")


def render_result(submission: dict):
    is_slm = submission["decision"].endswith("(SLM)")

    if is_slm:
        st.success(f"Recommended: {submission['decision']}")
    else:
        st.warning(f"Recommended: {submission['decision']}")

    if submission.get("hard_blocker"):
        st.error(f"Forced by: {submission['hard_blocker']}")

    percent = score_percent(submission["score"], submission["max_score"])
    st.write(f"Fit score: {submission['score']} / {submission['max_score']} points")
    st.progress(min(max(percent, 0), 100) / 100)

    st.subheader("Architect's summary")
    render_explanation(submission.get("ai_explanation", ""))


# ============================================================
# SIDEBAR NAVIGATION
# ============================================================

st.sidebar.header("ArchEval")

view = st.sidebar.radio("View", ["Assessment", "Result", "Rules", "Admin"])

try:
    health = requests.get(f"{API_BASE}/health", timeout=TIMEOUT)
    if health.status_code == 200:
        data = health.json()
        st.sidebar.metric("Submissions", data["total_submissions"])
        st.sidebar.caption(
            f"Store: {'connected' if data['store_configured'] else 'local only'} · "
            f"LLM: {'ready' if data['llm_available'] else 'no API key'}"
        )
    else:
        st.sidebar.error("Cannot connect to API")
except Exception as e:
    st.sidebar.error(f"API Error: {str(e)}")

try:
    questions = load_questions()
except Exception as e:
    st.error(f"Cannot load questions: {str(e)}")
    st.stop()


# ============================================================
# ASSESSMENT
# ============================================================

if view == "Assessment":

    st.title("SLM vs LLM Decision Assessment")
    st.write(
        "Evaluate deployment constraints, scale, and operational readiness "
        "to determine the optimal AI model class."
    )

    defaults = st.session_state.get("scenario", {})

    if st.button("Generate scenario"):
        with st.spinner("Generating scenario..."):
            try:
                response = requests.post(f"{API_BASE}/scenarios/generate", timeout=TIMEOUT)
                if response.status_code == 200:
                    st.session_state["scenario"] = response.json()
                    st.rerun()
                else:
                    st.error(response.json().get("detail", "Could not generate scenario."))
            except Exception as e:
                st.error(f"Error: {str(e)}")

    with st.form("assessment"):

        st.header("Project information")
        col1, col2 = st.columns(2)
        user_name = col1.text_input("Your name *", value=defaults.get("userName", ""))
        email = col2.text_input("Email", value=defaults.get("email", ""))
        company = col1.text_input("Company", value=defaults.get("companyName", ""))
        project = col2.text_input("Project name *", value=defaults.get("projectName", ""))
        description = st.text_area(
            "Project description *", value=defaults.get("projectDescription", "")
        )

        st.header("Gatekeepers")
        st.caption("A 'Yes' on a gatekeeper forces the decision regardless of score.")

        answers = {}

        for q in questions["gatekeepers"]:
            label = q["label"] + (f" {q['sub_label']}" if q.get("sub_label") else "")
            choice = st.radio(
                label,
                ["No", "Yes"],
                index=1 if defaults.get(q["id"]) else 0,
                horizontal=True,
                key=q["id"],
            )
            answers[q["id"]] = choice == "Yes"

        options = questions["external_api_options"]
        option_keys = list(options.keys())
        current = defaults.get(questions["external_api_question"]["id"], "risk_mitigation")
        answers[questions["external_api_question"]["id"]] = st.selectbox(
            questions["external_api_question"]["label"],
            option_keys,
            index=option_keys.index(current) if current in option_keys else 0,
            format_func=lambda k: options[k],
        )

        st.header("Scored questions")

        for q in questions["scored_questions"]:
            answers[q["id"]] = st.select_slider(
                q["text"],
                options=list(LIKERT_LABELS.keys()),
                value=int(defaults.get(q["id"], 3)),
                format_func=lambda v: LIKERT_LABELS[v],
                key=q["id"],
            )

        submitted = st.form_submit_button("Get recommendation", type="primary")

    if submitted:
        if not user_name.strip() or not project.strip() or not description.strip():
            st.warning("Please fill in the required User Info fields.")
        else:
            payload = {
                "userName": user_name,
                "email": email,
                "companyName": company,
                "projectName": project,
                "projectDescription": description,
                **answers,
            }
            try:
                response = requests.post(f"{API_BASE}/assessments", json=payload, timeout=TIMEOUT)
                if response.status_code == 200:
                    st.session_state["submission_id"] = response.json()["id"]
                    st.session_state.pop("scenario", None)
                    st.success("Assessment submitted. Open the Result view.")
                else:
                    st.error(f"Error: {response.json().get('detail', 'Unknown error')}")
            except Exception as e:
                st.error(f"Error: {str(e)}")


# ============================================================
# RESULT
# ============================================================

elif view == "Result":

    st.title("Recommendation")

    submission_id = st.session_state.get("submission_id")

    if not submission_id:
        st.info("Submit an assessment first.")
    else:
        try:
            response = requests.get(f"{API_BASE}/assessments/{submission_id}", timeout=TIMEOUT)
            if response.status_code == 200:
                render_result(response.json())
                if st.button("Refresh explanation"):
                    st.rerun()
            elif response.status_code == 404:
                st.error("Submission not found")
            else:
                st.error("Cannot load submission")
        except Exception as e:
            st.error(f"Error: {str(e)}")


# ============================================================
# RULES
# ============================================================

elif view == "Rules":

    st.title("How the decision is made")

    st.header("1. Gatekeepers")
    st.write(
        "Answering Yes to a gatekeeper immediately forces a decision regardless of the score. "
        "LLM-forcing gatekeepers take precedence over SLM-forcing ones."
    )
    for tier, title in (("A", "Forces LLM (checked first)"), ("B", "Forces SLM")):
        st.subheader(title)
        for q in questions["gatekeepers"]:
            if q["tier"] == tier:
                st.markdown(f"- **{q['blocker_text']}**: {q['label']}")

    st.caption(
        f"{questions['external_api_question']['label']} "
        "This answer is recorded for context and does not affect the decision."
    )

    st.header("2. Weighted score")
    st.write(
        f"If no gatekeeper fires, a score of {questions['threshold']} or more "
        f"(out of {questions['max_score']}) recommends an SLM; below that, an LLM."
    )
    st.table([
        {
            "Question": q["text"],
            "Weight": q["weight"],
            "Direction": "Favors LLM when agreed" if q["reverse"] else "Favors SLM when agreed",
        }
        for q in questions["scored_questions"]
    ])


# ============================================================
# ADMIN
# ============================================================

elif view == "Admin":

    st.title("Review board")
    st.caption("Restricted access for model evaluation review board.")

    password = st.text_input("Admin password", type="password")

    if password:
        try:
            response = requests.get(
                f"{API_BASE}/submissions",
                headers={"X-Admin-Password": password},
                timeout=TIMEOUT,
            )
            if response.status_code == 200:
                data = response.json()
                submissions = data["submissions"]

                col1, col2, col3 = st.columns(3)
                col1.metric("Submissions", data["total_submissions"])
                col2.metric("SLM", data["decisions"].get("SLM", 0))
                col3.metric("LLM", data["decisions"].get("LLM", 0))

                if submissions:
                    labels = {
                        f"{s['data']['projectName']} · {s['user']} · {s['timestamp'][:10]}": s
                        for s in submissions
                    }
                    selected = labels[st.selectbox("Submission", list(labels.keys()))]

                    left, right = st.columns([3, 7])
                    with left:
                        st.subheader("Answers")
                        st.json(selected["data"])
                    with right:
                        render_result(selected)
                else:
                    st.info("No submissions yet")
            elif response.status_code in (401, 403):
                st.error(response.json().get("detail", "Invalid password"))
            else:
                st.error("Cannot load submissions")
        except Exception as e:
            st.error(f"API Error: {str(e)}")

st.divider()
st.caption("Gatekeeper precedence, weighted fit score, AI-written justification")
