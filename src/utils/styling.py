import streamlit as st

MAP_PAGE_CSS = """
<style>
/* Let the map use the full height of the page */
div.block-container {
    padding-top: 1.5rem;
    padding-bottom: 0.5rem;
}

iframe[title="streamlit_folium.st_folium"] {
    border-radius: 12px;
}

div.stHeading h2 {
    font-size: 1.6rem;
    padding-top: 0;
}

div[data-testid="stVerticalBlockBorderWrapper"] p {
    white-space: pre-wrap;
}
</style>
"""

MAP_SHADOW_CSS_DARK_MODE = """
<style>
iframe[title="streamlit_folium.st_folium"] {
    box-shadow: 0 4px 18px rgba(0, 0, 0, 0.6);
}
</style>
"""

MAP_SHADOW_CSS_LIGHT_MODE = """
<style>
iframe[title="streamlit_folium.st_folium"] {
    box-shadow: 0 4px 18px rgba(91, 33, 182, 0.18);
}
</style>
"""


def load_custom_css():
    st.markdown(MAP_PAGE_CSS, unsafe_allow_html=True)
    if st.context.theme.type == "dark":
        st.markdown(MAP_SHADOW_CSS_DARK_MODE, unsafe_allow_html=True)
    else:
        st.markdown(MAP_SHADOW_CSS_LIGHT_MODE, unsafe_allow_html=True)
