"""formflow - dynamic form and qualification flow engine"""

__version__ = "0.1.0"
