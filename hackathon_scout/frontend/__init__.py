"""
Frontend package for the Hackathon Scout application.

Contains the client-side event reducer, the streaming HTTP client and
the Streamlit user interface.
"""
