"""
DRF renderers that only exist so ``?format=csv`` / ``?format=xlsx``
negotiate successfully.  Views return a finished ``HttpResponse`` for
these formats, so the renderers never serialize anything themselves.
"""

import json

from rest_framework import renderers

from .exporters import CSV_CONTENT_TYPE, XLSX_CONTENT_TYPE


class _PassthroughRenderer(renderers.BaseRenderer):
    charset = None
    render_style = "binary"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None or isinstance(data, (bytes, str)):
            return data or b""
        # Error payloads raised before the export is built.
        return json.dumps(data).encode("utf-8")


class CSVRenderer(_PassthroughRenderer):
    media_type = CSV_CONTENT_TYPE
    format = "csv"


class XLSXRenderer(_PassthroughRenderer):
    media_type = XLSX_CONTENT_TYPE
    format = "xlsx"
