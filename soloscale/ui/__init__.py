"""Streamlit views. Import only from app.py; nothing below the UI layer imports these."""
