"""
Core renderers.

DRF's stock ``JSONRenderer`` omits the charset parameter because JSON is
always UTF-8.  API clients of this service expect the explicit
``application/json; charset=utf-8`` content type, so the default
renderer declares it.
"""

from rest_framework import renderers


class JSONRenderer(renderers.JSONRenderer):
    charset = "utf-8"
