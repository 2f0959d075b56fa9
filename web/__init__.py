"""web/ -- Response helpers: encoders, templates, form binding, static files.

Layer rule: web/ may import from core/ but not from auth/.
"""
