"""
Hackathon Scout application package.

This package contains the streaming research scout: a FastAPI backend
that lets an OpenAI model search ArXiv and streams its progress as
JSON-line events, and a Streamlit frontend that folds the event stream
into an activity log and a running response.
"""

__version__ = "0.1.0"
