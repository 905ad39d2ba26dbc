"""Pressable backend: sites, collaborators, SFTP users."""

import logging

from siteops.api.outcome import payload_of
from siteops.backends import quote_id

logger = logging.getLogger(__name__)

BACKEND = "pressable"


def _api(ctx):
    return ctx.backend(BACKEND)


def get_sites(ctx):
    """GET sites"""
    return _api(ctx).request("sites")


def get_site(ctx, site_id_or_url):
    """GET sites/<site>"""
    return _api(ctx).request(f"sites/{quote_id(site_id_or_url)}")


def create_site(ctx, name, datacenter):
    """POST sites"""
    return _api(ctx).request("sites", "POST", {"name": name, "datacenter_code": datacenter})


def get_datacenters(ctx):
    """GET sites/datacenters"""
    return _api(ctx).request("sites/datacenters")


def create_site_collaborator(ctx, site_id_or_url, email):
    """POST site-collaborators/<site>"""
    return _api(ctx).request(f"site-collaborators/{quote_id(site_id_or_url)}", "POST", {"email": email})


def get_site_sftp_users(ctx, site_id_or_url):
    """GET site-sftp-users/<site>"""
    return _api(ctx).request(f"site-sftp-users/{quote_id(site_id_or_url)}")


def get_site_sftp_user_by_username(ctx, site_id_or_url, username):
    """GET site-sftp-users/<site>/<username>"""
    return _api(ctx).request(f"site-sftp-users/{quote_id(site_id_or_url)}/{quote_id(username)}")


def get_site_sftp_user_by_email(ctx, site_id_or_url, email):
    """Return the SFTP user whose email matches (case-insensitive), or None."""
    users = payload_of(get_site_sftp_users(ctx, site_id_or_url))
    if not isinstance(users, list):
        return None
    for user in users:
        if user.get("email") and user["email"].casefold() == email.casefold():
            return user
    return None


def rotate_site_sftp_user_password(ctx, site_id_or_url, username):
    """POST site-sftp-users/<site>/<username>/rotate-password -> new password or None."""
    response = payload_of(
        _api(ctx).request(f"site-sftp-users/{quote_id(site_id_or_url)}/{quote_id(username)}/rotate-password", "POST")
    )
    if not isinstance(response, dict):
        return None
    return response.get("password")
