"""
Survey subgroup dashboard.

Reshapes precomputed per-item, per-subgroup summary statistics into
chart- and table-ready rows and shows them in a Streamlit page.
"""
