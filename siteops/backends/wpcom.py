"""WordPress.com backend: sites, users, stickers, SSH users, code deployments."""

import logging
from collections.abc import Mapping

from siteops.api.batch import partition_outcome
from siteops.api.outcome import is_success, payload_of
from siteops.backends import quote_id, with_query

logger = logging.getLogger(__name__)

BACKEND = "wpcom"


def _api(ctx, version="v1"):
    return ctx.backend(BACKEND, version)


# ── Sites ─────────────────────────────────────────────────────────


def get_site(ctx, site_id_or_url):
    """GET sites/<site>"""
    return _api(ctx).request(f"sites/{quote_id(site_id_or_url)}")


def get_sites(ctx, params=None):
    """Return all sites indexed by site ID, or None on failure.

    Jetpack listings are keyed by ``userblog_id``, everything else by ``ID``.
    """
    response = payload_of(_api(ctx).request(with_query("sites", params)))
    if not isinstance(response, dict) or response.get("records") is None:
        return None
    records = response["records"]
    key = "userblog_id" if (params or {}).get("type") == "jetpack" else "ID"
    return {record[key]: record for record in records}


def get_sites_batch(ctx, site_ids_or_urls):
    """POST sites/batch -> BatchResult, or None if the batch call failed."""
    return partition_outcome(_api(ctx).request("sites/batch", "POST", {"sites": list(site_ids_or_urls)}))


def get_site_plugins_batch(ctx, site_ids_or_urls):
    """POST sites/batch/plugins -> BatchResult of per-site plugin mappings."""
    return partition_outcome(_api(ctx).request("sites/batch/plugins", "POST", {"sites": list(site_ids_or_urls)}))


def get_site_stats_batch(ctx, site_ids_or_urls, params=None, stats_type=None):
    """POST site-stats/batch; empty params/type are left out of the body."""
    body = {"sites": list(site_ids_or_urls), "params": params, "type": stats_type}
    body = {k: v for k, v in body.items() if v}
    return partition_outcome(_api(ctx).request("site-stats/batch", "POST", body))


def get_site_users_batch(ctx, site_ids_or_urls, params=None):
    """POST site-users/batch -> BatchResult of per-site user lists."""
    body = {"sites": list(site_ids_or_urls), "params": params or {}}
    result = partition_outcome(_api(ctx).request("site-users/batch", "POST", body))
    if result is None:
        return None
    return result.map_results(_user_records)


def _user_records(users):
    # items without a records envelope (null, bare lists) pass through unchanged
    if isinstance(users, Mapping):
        return users.get("records", [])
    return users


# ── Users ─────────────────────────────────────────────────────────


def get_site_user(ctx, site_id_or_url, user, params=None):
    """GET site-users/<site>/<user> (user ID, username or email)."""
    return _api(ctx).request(with_query(f"site-users/{quote_id(site_id_or_url)}/{quote_id(user)}", params))


def delete_site_user(ctx, site_id_or_url, user) -> bool:
    """DELETE site-users/<site>/<user>"""
    return is_success(_api(ctx).request(f"site-users/{quote_id(site_id_or_url)}/{quote_id(user)}", "DELETE"))


def get_site_ssh_username(ctx, site_id_or_url):
    """Return the SSH username of an Atomic site, or None."""
    user = payload_of(_api(ctx).request(f"site-ssh-users/{quote_id(site_id_or_url)}"))
    if not isinstance(user, dict):
        return None
    return user.get("username")


def rotate_site_sftp_user_password(ctx, site_id_or_url, username):
    """POST site-ssh-users/<site>/<username>/rotate-password -> new password or None."""
    response = payload_of(
        _api(ctx).request(f"site-ssh-users/{quote_id(site_id_or_url)}/{quote_id(username)}/rotate-password", "POST")
    )
    if not isinstance(response, dict):
        return None
    return response.get("password")


# ── Stickers ──────────────────────────────────────────────────────


def get_site_stickers(ctx, site_id_or_url):
    """Return the list of stickers on a site, or None."""
    response = payload_of(_api(ctx).request(f"site-stickers/{quote_id(site_id_or_url)}"))
    if not isinstance(response, dict):
        return None
    return response.get("records")


def add_site_sticker(ctx, site_id_or_url, sticker) -> bool:
    return is_success(_api(ctx).request(f"site-stickers/{quote_id(site_id_or_url)}/{quote_id(sticker)}", "POST"))


def remove_site_sticker(ctx, site_id_or_url, sticker) -> bool:
    return is_success(_api(ctx).request(f"site-stickers/{quote_id(site_id_or_url)}/{quote_id(sticker)}", "DELETE"))


# ── Agency sites (v2) ─────────────────────────────────────────────


def get_agency_sites(ctx, agency_id, pending=False):
    """GET agency/<agency>/sites[/pending]"""
    endpoint = f"agency/{agency_id}/sites/pending" if pending else f"agency/{agency_id}/sites"
    return _api(ctx, "v2").request(endpoint)


def get_agency_site(ctx, agency_id, agency_site_id):
    """Return the agency site with the given ID, or None."""
    sites = payload_of(get_agency_sites(ctx, agency_id))
    if not isinstance(sites, list):
        return None
    for site in sites:
        if str(site.get("id")) == str(agency_site_id):
            return site
    return None


# ── Code deployments (v2) ─────────────────────────────────────────


def get_github_installations(ctx):
    """GET hosting/github/installations"""
    return _api(ctx, "v2").request("hosting/github/installations")


def get_installation_for_repository(ctx, repository):
    """Return the GitHub app installation ID owning *repository*, or None."""
    installations = payload_of(get_github_installations(ctx))
    if not isinstance(installations, list):
        return None
    owner = repository.get("owner", {}).get("login")
    for installation in installations:
        if isinstance(installation, dict) and installation.get("account_name") == owner:
            return installation.get("external_id")
    return None


def get_code_deployments(ctx, site_id):
    """GET sites/<site>/hosting/code-deployments"""
    return _api(ctx, "v2").request(f"sites/{quote_id(site_id)}/hosting/code-deployments")


def create_code_deployment(ctx, site_id, params):
    """POST sites/<site>/hosting/code-deployments

    *params* holds external_repository_id, branch_name, target_dir,
    installation_id and optionally is_automated / workflow_path.
    """
    return _api(ctx, "v2").request(f"sites/{quote_id(site_id)}/hosting/code-deployments", "POST", params)


def create_code_deployment_run(ctx, site_id, code_deployment_id):
    """POST sites/<site>/hosting/code-deployments/<id>/runs (triggers a deploy)."""
    return _api(ctx, "v2").request(f"sites/{quote_id(site_id)}/hosting/code-deployments/{code_deployment_id}/runs", "POST")
