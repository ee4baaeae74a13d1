"""
Markup for showing generated HTML in an isolated frame.
"""

import html
from typing import Optional

# Scripts may run (Tailwind CDN); no same-origin access to the Streamlit page
PREVIEW_SANDBOX = "allow-scripts"


def sandboxed_iframe(document: Optional[str], height: int = 580) -> str:
    """
    Wrap a generated document in an ``<iframe srcdoc>`` with a strict sandbox.

    Streamlit's own component frame allows same-origin access, so the
    generated document gets a frame of its own inside it.

    Args:
        document: Generated HTML document.
        height: Frame height in pixels.

    Returns:
        HTML for a single iframe element.
    """
    return (
        f'<iframe sandbox="{PREVIEW_SANDBOX}" '
        f'srcdoc="{html.escape(document or "", quote=True)}" '
        f'title="Generated preview" '
        f'style="width:100%;height:{height}px;border:0;background:white"></iframe>'
    )
