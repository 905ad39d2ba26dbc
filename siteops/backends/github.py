"""GitHub backend: repositories."""

from siteops.backends import quote_id

BACKEND = "github"


def get_repository(ctx, name):
    """GET repositories/<name>"""
    return ctx.backend(BACKEND).request(f"repositories/{quote_id(name)}")


def create_repository(ctx, name, repo_type=None, description=None):
    """POST repositories

    *repo_type* selects the ``team51-<type>-scaffold`` template repository.
    """
    body = {
        "name": name,
        "description": description,
        "template": f"team51-{repo_type}-scaffold" if repo_type else None,
    }
    return ctx.backend(BACKEND).request("repositories", "POST", {k: v for k, v in body.items() if v})
