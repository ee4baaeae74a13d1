"""
Screenshot to Code

Upload a UI screenshot and get back a self-contained HTML + Tailwind CSS
document generated by Google Gemini.
"""

__version__ = "0.1.0"
