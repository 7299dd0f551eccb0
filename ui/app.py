"""
BarcodeLookupAgent — Result Dashboard
=====================================

A thin result display over the agent's HTTP API.

Architecture:
    - RESULT text is polled from BarcodeLookupAgent /result
    - Reset, View files and Export are forwarded to the agent
    - Detector backend and catalog URL live in agent config.yaml, NOT here

Usage:
    streamlit run app.py

Environment:
    BARCODE_AGENT_URL — agent HTTP root (default: http://localhost:8002)
"""

import os
import time
from typing import Optional

import requests
import streamlit as st

# =============================================================================
# Configuration
# =============================================================================

AGENT_URL = os.getenv("BARCODE_AGENT_URL", "http://localhost:8002")
READY_TEXT = "Ready to scan..."

st.set_page_config(
    page_title="Barcode Scanner",
    page_icon="🏷️",
    layout="centered",
)


# =============================================================================
# Networking helpers
# =============================================================================

def fetch_result() -> Optional[dict]:
    """Poll agent /result endpoint."""
    try:
        r = requests.get(f"{AGENT_URL}/result", timeout=2)
        if r.status_code == 200:
            return r.json()
    except requests.RequestException:
        pass
    return None


def fetch_agent_health() -> bool:
    """Check agent liveness."""
    try:
        r = requests.get(f"{AGENT_URL}/health", timeout=2)
        return r.status_code == 200
    except requests.RequestException:
        return False


def post_reset() -> bool:
    try:
        r = requests.post(f"{AGENT_URL}/reset", timeout=2)
        return r.status_code == 200
    except requests.RequestException:
        return False


def fetch_files() -> Optional[dict]:
    try:
        r = requests.get(f"{AGENT_URL}/files", timeout=5)
        if r.status_code == 200:
            return r.json()
    except requests.RequestException:
        pass
    return None


def post_export() -> str:
    """Ask the agent to export its files; returns the message to show."""
    try:
        r = requests.post(f"{AGENT_URL}/export", timeout=10)
    except requests.RequestException as e:
        return f"Export failed: {e}"
    body = r.json()
    if r.status_code != 200:
        return body.get("error", f"Export failed: HTTP {r.status_code}")
    return f"Files exported to:\n{body['directory']}\n\nCheck your Downloads folder!"


# =============================================================================
# Main UI
# =============================================================================

def main():
    if "message" not in st.session_state:
        st.session_state.message = None

    with st.sidebar:
        st.header("Agent")
        if fetch_agent_health():
            st.success("🟢 Agent Online")
        else:
            st.error("🔴 Agent Offline")
        st.text(f"Agent: {AGENT_URL}")

        st.divider()
        auto_refresh = st.checkbox("Auto refresh", value=True)
        refresh_rate = st.slider("Refresh (s)", 0.3, 3.0, 0.5, 0.1)

    col_a, col_b, col_c = st.columns(3)
    with col_a:
        if st.button("🔄 Reset", use_container_width=True):
            post_reset()
            st.session_state.message = None
    with col_b:
        if st.button("📄 View files", use_container_width=True):
            files = fetch_files()
            if files is None:
                st.session_state.message = "Could not load files"
            else:
                st.session_state.message = (
                    "=== API RESPONSES ===\n"
                    f"{files['api_responses']}\n\n"
                    "=== PRODUCTS ===\n"
                    f"{files['products']}"
                )
    with col_c:
        if st.button("⬇ Export", use_container_width=True):
            st.session_state.message = post_export()

    st.divider()

    result = fetch_result()
    if st.session_state.message:
        st.code(st.session_state.message)
    elif result is None:
        st.warning("No result available")
    else:
        lines = result.get("display", READY_TEXT).split("\n", 1)
        st.markdown(f"## {lines[0]}")
        if len(lines) > 1:
            st.markdown(f"### {lines[1]}")
        st.caption(f"Scanner: `{result.get('scan_state', '-')}`")

    if auto_refresh and not st.session_state.message:
        time.sleep(refresh_rate)
        st.rerun()


if __name__ == "__main__":
    main()
