"""Jetpack backend: per-site module lists and settings."""

from siteops.api.batch import partition_outcome
from siteops.api.codec import encode_json
from siteops.api.outcome import payload_of
from siteops.backends import quote_id

BACKEND = "jetpack"


def get_site_modules(ctx, site_id_or_url):
    """GET modules/<site>"""
    return ctx.backend(BACKEND).request(f"modules/{quote_id(site_id_or_url)}")


def get_site_modules_batch(ctx, site_ids_or_urls):
    """POST modules/batch -> BatchResult of per-site module mappings."""
    return partition_outcome(ctx.backend(BACKEND).request("modules/batch", "POST", {"sites": list(site_ids_or_urls)}))


def update_site_modules_settings(ctx, site_id_or_url, settings):
    """Update module settings; True when the backend reports success, None on failure.

    The settings are sent as a JSON string inside the body.
    """
    outcome = ctx.backend(BACKEND).request(
        f"modules/{quote_id(site_id_or_url)}", "POST", {"settings": encode_json(settings)}
    )
    response = payload_of(outcome)
    if not isinstance(response, dict):
        return None
    return (response.get("data") or {}).get("code") == "success"
