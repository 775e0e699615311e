"""
Application interfaces for the shot tracker
"""
