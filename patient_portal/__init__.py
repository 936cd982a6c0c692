"""Patient portal (Streamlit) and its API client."""
