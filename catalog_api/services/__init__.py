"""
Use cases for the catalogue API.

Routers call these services instead of touching repositories or the image
store directly; services own request validation and error translation.
"""
