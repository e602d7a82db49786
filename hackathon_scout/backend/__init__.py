"""
Backend package for the Hackathon Scout application.

Contains the ArXiv fetcher, the stream event codec, the stream
transformer, the model-calling runtime and the FastAPI server that
relays events to clients.
"""
