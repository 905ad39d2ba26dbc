"""Per-backend request builders on top of the shared executor."""

from urllib.parse import quote

import httpx


class Backend:
    """Routes endpoints to ``<backend>/<version>/<endpoint>`` on the executor."""

    def __init__(self, executor, name, version="v1"):
        self.executor = executor
        self.name = name
        self.version = version

    def request(self, endpoint, method="GET", body=None):
        return self.executor.execute(f"{self.name}/{self.version}/{endpoint}", method, body)


def quote_id(site_id_or_url) -> str:
    """URL-quote a resource identifier unless it is numeric."""
    value = str(site_id_or_url)
    return value if value.isdigit() else quote(value, safe="")


def with_query(endpoint: str, params: dict | None) -> str:
    """Append *params* as a query string, skipping empty mappings."""
    if not params:
        return endpoint
    return f"{endpoint}?{httpx.QueryParams(params)}"
