"""Shared look and feel for the awards portal pages."""

from __future__ import annotations

from contextlib import contextmanager
from html import escape as html_escape
from typing import Any, Iterator, Optional

import streamlit as st

_THEME_CSS = """
<style>
:root {
    --award-accent: #0F766E;
    --award-accent-soft: #E6F4F1;
    --award-surface: #FFFFFF;
    --award-border: rgba(15, 118, 110, 0.18);
    --award-text: #1F2933;
    --award-muted: #52606D;
    --award-required: #DC2626;
}

[data-testid="stAppViewContainer"] {
    background: linear-gradient(180deg, #F4FAF9 0%, #FFFFFF 60%);
}

.block-container {
    padding-top: 2rem;
    padding-bottom: 3rem;
}

.award-header {
    display: flex;
    align-items: center;
    gap: 1.25rem;
    padding: 1.5rem 1.75rem;
    background: var(--award-surface);
    border-radius: 1.25rem;
    border: 1px solid var(--award-border);
    margin-bottom: 1.75rem;
}

.award-header__icon {
    font-size: 2.5rem;
    line-height: 1;
}

.award-header__title {
    margin: 0;
    font-size: 2rem;
    font-weight: 700;
    color: var(--award-text);
}

.award-header__subtitle {
    margin: 0.25rem 0 0 0;
    color: var(--award-muted);
}

.award-card {
    background: var(--award-surface);
    border-radius: 1rem;
    border: 1px solid var(--award-border);
    padding: 1.25rem 1.5rem;
    margin-bottom: 1rem;
}

.award-card__title {
    margin: 0 0 0.75rem 0;
    font-size: 1.2rem;
    font-weight: 600;
}

.award-card__description {
    margin-top: -0.35rem;
    color: var(--award-muted);
}

.award-required {
    color: var(--award-required);
    margin-left: 0.25rem;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Configure the page and inject the shared stylesheet."""

    st.set_page_config(
        page_title=page_title,
        page_icon=page_icon,
        layout="wide",
        initial_sidebar_state="expanded",
    )
    st.markdown(_THEME_CSS, unsafe_allow_html=True)


def page_header(
    title: str,
    subtitle: Optional[str] = None,
    icon: Optional[str] = None,
    *,
    container: Optional[Any] = None,
) -> None:
    """Render the page title block."""

    icon_markup = f"<span class='award-header__icon'>{icon}</span>" if icon else ""
    subtitle_markup = (
        f"<p class='award-header__subtitle'>{html_escape(subtitle)}</p>" if subtitle else ""
    )
    target = container.markdown if container is not None else st.markdown
    target(
        f"""
        <div class="award-header">
            {icon_markup}
            <div>
                <h1 class="award-header__title">{html_escape(title)}</h1>
                {subtitle_markup}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


@contextmanager
def section_card(title: Optional[str] = None, description: Optional[str] = None) -> Iterator[Any]:
    """Render a bordered container with an optional title and description."""

    container = st.container(border=True)
    if title:
        container.markdown(f"<h3 class='award-card__title'>{html_escape(title)}</h3>", unsafe_allow_html=True)
    if description:
        container.markdown(
            f"<p class='award-card__description'>{html_escape(description)}</p>",
            unsafe_allow_html=True,
        )
    yield container
