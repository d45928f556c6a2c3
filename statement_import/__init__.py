"""
statement_import

Reads bank statement exports into movements and links them to contacts,
savings plans and securities.
"""
__version__ = "0.1.0"
