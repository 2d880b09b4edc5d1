"""
API routes.
Each module owns one router; main.py includes them.
"""
