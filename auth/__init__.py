"""auth/ -- Authentication and authorization package for AssetVerse.

Layer rule: auth/ imports stdlib, third-party libraries, and docstore/ (for
the role lookups). It does NOT import from api/.
api/ imports from auth/, not the other way around.
"""
