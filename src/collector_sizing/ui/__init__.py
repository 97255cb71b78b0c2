"""
UI Module
=========

Streamlit-based sizing interface:
- Sites
- Summary
- System Configuration
- Import / Export
"""
