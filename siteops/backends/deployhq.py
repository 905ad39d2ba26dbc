"""DeployHQ backend: templates and projects."""

from siteops.api.outcome import payload_of

BACKEND = "deployhq"

ZONES = {
    3: "Europe (UK)",
    6: "North America (East)",
    9: "North America (West)",
}


def get_templates(ctx):
    """Return ``{permalink: name}`` for all project templates, or None."""
    templates = payload_of(ctx.backend(BACKEND).request("templates"))
    if not isinstance(templates, list):
        return None
    return {t["permalink"]: t["name"] for t in templates}


def create_project(ctx, name, zone_id, params=None):
    """POST projects"""
    if zone_id not in ZONES:
        raise ValueError(f"Unknown DeployHQ zone: {zone_id}")
    body = {**(params or {}), "name": name, "zone_id": zone_id}
    return ctx.backend(BACKEND).request("projects", "POST", body)
