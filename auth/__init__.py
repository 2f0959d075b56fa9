"""auth/ -- Principals and the access guard.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from web/. Authentication itself (sessions, tokens,
passwords) is the caller's business; the guard only asks a principal whether
it is authenticated and which roles it holds.
"""
