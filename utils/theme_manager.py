"""Theme management utilities"""
import streamlit as st


class ThemeManager:
    """Manage dark/light theme switching"""

    BASE_CSS = """
    <style>
        .result-card {
            border-radius: 8px;
            padding: 0.8rem 1rem;
            min-height: 200px;
            margin-bottom: 0.5rem;
        }
        .result-card h4 {
            text-align: center;
            text-transform: capitalize;
            white-space: nowrap;
            overflow: hidden;
            text-overflow: ellipsis;
            margin: 0 0 0.5rem 0;
        }
        .result-description {
            display: -webkit-box;
            -webkit-line-clamp: 3;
            -webkit-box-orient: vertical;
            overflow: hidden;
        }
        .score-circle {
            width: 180px;
            height: 180px;
            border-radius: 50%;
            background-color: #1976d2;
            margin: 0.5rem auto;
            display: flex;
            align-items: center;
            justify-content: center;
        }
        .score-circle span {
            color: #ffffff;
            font-size: 2rem;
            font-weight: 700;
        }
        #detail-content:focus {
            outline: 3px solid #ff9800;
            outline-offset: 2px;
        }
    </style>
    """

    @staticmethod
    def get_theme_css(is_dark: bool) -> str:
        """Get CSS for current theme"""
        if is_dark:
            return """
            <style>
                .stApp {
                    background-color: #0e1117;
                    color: #fafafa;
                }
                .stSidebar {
                    background-color: #1a1d23;
                }
                .result-card {
                    background-color: #262730;
                    border: 1px solid #555555;
                    color: #fafafa;
                }
                /* Keep charts in light mode for accurate colours */
                .js-plotly-plot .plotly {
                    background-color: white !important;
                }
            </style>
            """
        return """
        <style>
            .stApp {
                background-color: #ffffff;
                color: #262730;
            }
            .stSidebar {
                background-color: #f8f9fa;
            }
            .result-card {
                background-color: #ffffff;
                border: 1px solid #e6e6e6;
                box-shadow: 0 1px 3px rgba(0, 0, 0, 0.12);
                color: #262730;
            }
        </style>
        """

    @staticmethod
    def apply_theme():
        """Apply current theme CSS"""
        is_dark = st.session_state.get('dark_mode', False)
        st.markdown(ThemeManager.BASE_CSS + ThemeManager.get_theme_css(is_dark), unsafe_allow_html=True)
