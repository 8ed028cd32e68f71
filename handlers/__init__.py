"""
handlers/ - Presentation Layer
================================
HTTP handlers. Each handler decodes the request, delegates to the
repository, and encodes the response envelope.
No SQL lives here.
"""
