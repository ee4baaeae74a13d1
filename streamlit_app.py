"""
Streamlit web interface for Screenshot to Code.

Upload a UI screenshot, send it to the conversion API and inspect the
generated HTML as a live preview or as source.
"""

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from screen2code.client import ConversionAPI, UploadSession
from screen2code.client.preview import sandboxed_iframe
from screen2code.io.upload_loader import UploadLoader
from screen2code.models import DisplayTab, MAX_UPLOAD_BYTES

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="Screenshot → Code",
    page_icon="📷",
    layout="wide",
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2rem;
        font-weight: 700;
        text-align: center;
        background: linear-gradient(135deg, #6366f1, #a855f7);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        text-align: center;
        color: #888;
        margin-bottom: 2rem;
    }
    .upload-placeholder {
        border: 2px dashed #444;
        border-radius: 10px;
        min-height: 200px;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        color: #888;
    }
</style>
""", unsafe_allow_html=True)

TAB_LABELS = {DisplayTab.PREVIEW: "Preview", DisplayTab.CODE: "Code"}
UPLOAD_TYPES = ["png", "jpg", "jpeg", "webp"]

loader = UploadLoader()

# Initialize session state
if "upload_session" not in st.session_state:
    st.session_state.upload_session = UploadSession(api=ConversionAPI())
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0


def on_file_change():
    """Hand the picked file to the session."""
    session: UploadSession = st.session_state.upload_session
    uploaded = st.session_state.get(f"uploader_{st.session_state.uploader_key}")
    if uploaded is None:
        return

    session.select_file(
        loader.from_bytes(uploaded.getvalue(), media_type=uploaded.type, filename=uploaded.name)
    )


def on_convert():
    # Runs before the rerun, so the buttons are drawn in their loading state
    st.session_state.upload_session.start_conversion()


def on_reset():
    st.session_state.upload_session.reset()
    # A new key gives an empty file uploader
    st.session_state.uploader_key += 1


def on_tab_change():
    st.session_state.upload_session.select_tab(st.session_state.result_tab)


def upload_section(session: UploadSession):
    """File picker, preview and actions."""
    st.file_uploader(
        "Drop a screenshot or click to upload",
        type=UPLOAD_TYPES,
        key=f"uploader_{st.session_state.uploader_key}",
        on_change=on_file_change,
        help=f"PNG, JPEG, WebP • Max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB",
    )

    preview = session.preview_bytes()
    if preview is not None:
        dimensions = loader.image_size(session.image)
        caption = session.image.filename
        if dimensions:
            caption += f" ({dimensions[0]}×{dimensions[1]})"
        st.image(preview, caption=caption, width="stretch")
    else:
        st.markdown(
            '<div class="upload-placeholder"><span style="font-size:3rem">📷</span>'
            '<p>No screenshot selected</p></div>',
            unsafe_allow_html=True
        )

    col1, col2, _ = st.columns([1, 1, 4])
    with col1:
        st.button(
            "Converting..." if session.loading else "Generate Code",
            type="primary",
            disabled=not session.can_convert,
            on_click=on_convert,
        )
    with col2:
        if session.can_reset:
            st.button("Start Over", on_click=on_reset)

    if session.loading:
        with st.spinner("Converting..."):
            session.submit()
        st.rerun()


def result_section(session: UploadSession):
    """Rendered preview or source of the generated HTML."""
    # The session decides the tab (a new result always opens on Preview)
    st.session_state.result_tab = session.active_tab
    st.radio(
        "View",
        options=list(DisplayTab),
        format_func=lambda tab: TAB_LABELS[tab],
        horizontal=True,
        key="result_tab",
        on_change=on_tab_change,
        label_visibility="collapsed",
    )

    if session.active_tab == DisplayTab.PREVIEW:
        components.html(sandboxed_iframe(session.html, height=580), height=600)
    else:
        st.code(session.html, language="html", line_numbers=True)

    st.download_button(
        label="⬇️ Download HTML",
        data=session.html,
        file_name="screenshot.html",
        mime="text/html",
    )


def main():
    """Main application entry point."""
    session: UploadSession = st.session_state.upload_session

    st.markdown('<div class="main-header">Screenshot → Code</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Upload a UI screenshot and get HTML + Tailwind CSS</div>',
        unsafe_allow_html=True
    )

    upload_section(session)

    if session.error:
        st.error(session.error)

    if session.has_result:
        st.divider()
        result_section(session)


if __name__ == "__main__":
    main()
