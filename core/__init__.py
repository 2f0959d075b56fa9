"""core/ -- Configuration and the shared exception hierarchy.

Layer rule: core/ is the kernel. It does not import from auth/ or web/.
"""
