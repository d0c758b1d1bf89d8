"""Document preprocessing package for API adapters.

Scope:
- Converts PDF/DOCX/TXT files into plain text for the documentation path.
"""
