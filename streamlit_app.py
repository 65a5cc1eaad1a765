"""
Minimal Streamlit frontend for counterparty risk assessment

Run:
  streamlit run streamlit_app.py
"""

import asyncio
import json
import os
import sys
from pathlib import Path

import streamlit as st

# Ensure src is on sys.path for imports
CURRENT_DIR = Path(__file__).parent
SRC_DIR = CURRENT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

try:
    from counterparty_risk import InvalidAnalysisRequest, create_risk_engine
    from counterparty_risk.models.risk_config import ProviderSettings
except Exception as e:
    raise ImportError(
        "Could not import create_risk_engine. Ensure you're running from the project directory "
        "and that the 'src' folder exists."
    ) from e

INDUSTRIES = ["default", "technology", "healthcare", "manufacturing", "retail", "energy", "financial", "startups"]
LANGUAGES = ["", "hi", "es", "fr", "de"]


def run_analysis(payload: dict, settings: ProviderSettings, config_path: str | None):
    """Run one analysis on a fresh engine so no HTTP client outlives the event loop"""

    async def _run():
        async with create_risk_engine(config_path, settings=settings) as engine:
            return await engine.aggregate_risk(payload)

    return asyncio.run(_run())


def render_report(report):
    risk = report.risk

    cols = st.columns(4)
    cols[0].metric("Score", f"{risk.score}/100")
    cols[1].metric("Risk Level", risk.risk_level.value.upper())
    cols[2].metric("Confidence", f"{risk.confidence}%")
    cols[3].metric("Time (s)", f"{report.metadata.processing_time:.2f}")

    if report.metadata.failed_sources:
        st.warning("Unavailable sources: " + ", ".join(report.metadata.failed_sources))

    summary = report.executive_summary
    for title, items in (("Primary concerns", summary.primary_concerns),
                         ("Strengths", summary.strengths),
                         ("Key findings", summary.key_findings)):
        if items:
            st.markdown(f"**{title}**")
            for item in items:
                st.markdown(f"- {item}")

    if risk.deductions:
        with st.expander(f"Deductions ({len(risk.deductions)})"):
            for d in risk.deductions:
                st.markdown(f"- **{d.category}** ({d.source}, weight {d.weight:.2f}): "
                            f"-{d.points_deducted:.1f}, {d.reason}")

    with st.expander("Recommendations"):
        recommendations = report.recommendations
        for title, items in (("Immediate", recommendations.immediate),
                             ("Short term", recommendations.short_term),
                             ("Long term", recommendations.long_term),
                             ("Monitoring", recommendations.monitoring)):
            if items:
                st.markdown(f"**{title}**")
                for item in items:
                    st.markdown(f"- {item}")

    if report.translation is not None and report.translation.ok:
        with st.expander("Translation"):
            translation = report.translation.value
            st.caption(f"Service: {translation.service} • Confidence: {translation.confidence:.2f}")
            st.text(translation.translated_text[:2000])

    with st.expander("Raw report"):
        st.json(json.loads(json.dumps(report.to_dict())))


def main():
    st.set_page_config(page_title="Counterparty Risk", page_icon="⚖️", layout="centered")
    st.title("⚖️ Counterparty Risk Assessment")
    st.caption("Score a contract and its counterparty across document, legal and financial sources.")

    # Sidebar configuration
    with st.sidebar:
        st.header("Settings")
        alpha_key = st.text_input("Alpha Vantage API Key", value=os.getenv("ALPHA_VANTAGE_API_KEY", "demo"),
                                  type="password")
        court_key = st.text_input("CourtListener API Key (optional)",
                                  value=os.getenv("COURT_LISTENER_API_KEY", ""), type="password")
        config_path = st.text_input("Configuration file (optional)", value="")
        st.divider()
        upload = st.file_uploader("Upload contract TXT file", type=["txt"])

    defaults = ProviderSettings.from_env()
    settings = ProviderSettings(
        alpha_vantage_key=alpha_key or "demo",
        court_listener_key=court_key or None,
        translation_endpoints=defaults.translation_endpoints,
        timeout_seconds=defaults.timeout_seconds
    )

    text = upload.read().decode("utf-8", errors="replace") if upload else ""
    document_text = st.text_area("Contract text", value=text, height=200,
                                 placeholder="This agreement between ...")
    counterparty = st.text_input("Counterparty (company name or ticker)")
    cols = st.columns(2)
    industry = cols[0].selectbox("Industry", INDUSTRIES, index=0)
    target_language = cols[1].selectbox("Translate to", LANGUAGES, index=0)

    analyze = st.button("Analyze", type="primary", use_container_width=True)

    if analyze:
        payload = {
            "document_text": document_text,
            "counterparty": counterparty or None,
            "industry": industry,
            "target_language": target_language or None,
        }
        try:
            with st.spinner("Analyzing..."):
                report = run_analysis(payload, settings, config_path or None)
            render_report(report)

            # Save simple history
            history = st.session_state.get("history", [])
            history.append({
                "counterparty": counterparty or "unknown",
                "score": report.risk.score,
                "level": report.risk.risk_level.value,
                "confidence": report.risk.confidence,
            })
            st.session_state.history = history

        except InvalidAnalysisRequest as e:
            st.error(f"Invalid request: {e}")
        except Exception as e:
            st.error(f"Error running analysis: {e}")

    # Show history
    history = st.session_state.get("history", [])
    if history:
        with st.expander(f"History ({len(history)})"):
            for i, item in enumerate(history[::-1], 1):
                st.markdown(f"{i}. **{item['counterparty']}**: {item['score']}/100 ({item['level']})")
                st.caption(f"Confidence: {item['confidence']}%")


if __name__ == "__main__":
    main()
