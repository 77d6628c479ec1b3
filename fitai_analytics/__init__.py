"""
FitAI Analytics
Training analytics and recommendation engine for the FitAI platform
"""

__version__ = "1.0.0"
